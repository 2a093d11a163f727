"""CV summary prompt template.

Dependencies: langchain_core.prompts
System role: Prompt template for the summarization task
"""

from langchain_core.prompts import ChatPromptTemplate

SUMMARY_SYSTEM_PROMPT = """You are an experienced technical recruiter. You read OCR text extracted from a candidate's CV and produce a structured assessment.

Rules:
- Use only information present in the text. Leave fields empty or null when the CV does not say.
- The OCR text may contain broken lines or stray characters; read through them.
- score is an integer from 1 (weak) to 10 (exceptional) judging clarity, relevance and depth of experience.
- justification is a single sentence explaining the score."""

SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SUMMARY_SYSTEM_PROMPT),
    (
        "human",
        """Summarize this CV:

{cv_text}""",
    ),
])


def get_summary_prompt() -> ChatPromptTemplate:
    """Get the CV summary prompt template."""
    return SUMMARY_PROMPT
