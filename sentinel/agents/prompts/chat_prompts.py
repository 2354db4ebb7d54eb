"""System prompt and context template for the analyst chat."""

SYSTEM_PROMPT = """You are a competitive intelligence analyst answering follow-up questions about an analysis you already completed.

Answer using the context below. If the context does not contain the answer, say so plainly instead of guessing. Keep answers concise and specific.

CONTEXT:
{context}"""


def build_chat_context(
    target_company: str,
    analysis_type: str,
    extracted_content: str,
    swot_json: str,
    final_report: str,
) -> str:
    return (
        f"COMPANY: {target_company}\n"
        f"ANALYSIS TYPE: {analysis_type}\n"
        f"RAW EXTRACTED DATA:\n{extracted_content}\n\n"
        f"GENERATED SWOT:\n{swot_json}\n\n"
        f"FINAL REPORT:\n{final_report}"
    )
