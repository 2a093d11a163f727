"""
CV summarization task using Google Gemini via LangChain.

Sends extracted text to the model with structured output (CVSummary) and
returns the parsed result together with model and token usage metadata.
Each call is bounded by a hard timeout so a hung request cannot pin the
worker.

Dependencies: langchain_core, langchain_google_genai
System role: Second stage of the processing pipeline (AI summary)
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

from langchain_core.runnables import Runnable
from langchain_google_genai import ChatGoogleGenerativeAI

from backend.core.cv_summarizer.models import CVSummary, SummaryOutcome
from backend.core.cv_summarizer.tasks.summary_prompt import get_summary_prompt
from backend.core.exceptions import SummarizationError

logger = logging.getLogger(__name__)


class SummarizationTask:
    """Summarize CV text into a CVSummary."""

    def __init__(
        self,
        model_id: str = "gemini-2.5-flash",
        api_key: str = "",
        temperature: float = 0.0,
        timeout_seconds: float = 120.0,
        max_retries: int = 2,
        chain: Runnable | None = None,
    ) -> None:
        """
        Initialize summarization task.

        Args:
            model_id: Google Gemini model identifier
            api_key: Google API key
            temperature: Model temperature (0.0 for deterministic)
            timeout_seconds: Hard ceiling for one summarize() call
            max_retries: Client-side retries for transient errors
            chain: Prebuilt runnable returning {"raw", "parsed", "parsing_error"} (tests)
        """
        self._model_id = model_id
        self._timeout_seconds = timeout_seconds
        self._chain = chain or self._build_chain(model_id, api_key, temperature, timeout_seconds, max_retries)

    @staticmethod
    def _build_chain(
        model_id: str,
        api_key: str,
        temperature: float,
        timeout_seconds: float,
        max_retries: int,
    ) -> Runnable:
        model = ChatGoogleGenerativeAI(
            model=model_id,
            google_api_key=api_key or None,
            temperature=temperature,
            timeout=timeout_seconds,
            max_retries=max_retries,
        )
        return get_summary_prompt() | model.with_structured_output(CVSummary, include_raw=True)

    def summarize(self, text: str) -> SummaryOutcome:
        """
        Produce a structured summary of CV text.

        Args:
            text: Extracted CV text (non-empty)

        Returns:
            SummaryOutcome: Parsed summary with model id and usage

        Raises:
            SummarizationError: Empty input, model error, timeout or unparseable output

        Note:
            A timed-out call is abandoned, not interrupted. Its thread keeps
            running until the client's own timeout ends the request, at most
            timeout_seconds * (max_retries + 1). Each call gets a fresh
            single-thread executor, so an abandoned call never blocks the next
            one.
        """
        if not text.strip():
            raise SummarizationError("Cannot summarize empty text")

        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self._chain.invoke, {"cv_text": text})
        try:
            response = future.result(timeout=self._timeout_seconds)
        except FutureTimeoutError as e:
            future.cancel()
            raise SummarizationError(
                f"Summarizer timed out after {self._timeout_seconds}s",
                {"model_id": self._model_id},
            ) from e
        except Exception as e:  # pylint: disable=broad-except
            raise SummarizationError(
                f"Summarizer call failed: {type(e).__name__}: {e}",
                {"model_id": self._model_id},
            ) from e
        finally:
            executor.shutdown(wait=False)

        parsed = response.get("parsed")
        if not isinstance(parsed, CVSummary):
            raise SummarizationError(
                "Summarizer returned no structured result",
                {"model_id": self._model_id, "parsing_error": str(response.get("parsing_error"))},
            )

        usage = self._usage_from(response.get("raw"))
        logger.info(
            "summarize - Summary generated",
            extra={"model_id": self._model_id, "score": parsed.score, **usage},
        )
        return SummaryOutcome(result=parsed, model_id=self._model_id, usage=usage)

    @staticmethod
    def _usage_from(raw: Any) -> dict[str, Any]:
        usage = getattr(raw, "usage_metadata", None) or {}
        return {
            key: usage[key]
            for key in ("input_tokens", "output_tokens", "total_tokens")
            if key in usage
        }
