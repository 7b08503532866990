"""Prompt templates for draft replies and intake follow-up questions."""

from __future__ import annotations

from chatdraft.drafting.fingerprint import DEFAULT_MAX_LINES, truncate_transcript

NO_CONTEXT = "User hasn't filled out questionnaire yet"

DEFAULT_TONE = "Be conversational, not robotic."

# Providers whose agents expect a more formal register.
PROVIDER_TONES = {
    "zendesk": "Be professional and courteous.",
}

_DRAFT_TEMPLATE = """\
You are a strategic customer support assistant helping resolve an issue in a live chat.
YOUR JOB: Work toward resolving the customer's problem WITHOUT committing them to unwanted actions.

CORE RULES:
1. UNDERSTAND THE ISSUE: What does the customer actually need? (from context if available)
2. VERIFY FEASIBILITY: Ask what happens if your preferred solution isn't available.
3. GET CONSENT: Never commit to a solution without clear agreement.
4. OFFER A PAUSE: If the store can't meet their needs, say "Let me pause here. I want to make sure we explore all options. Can I check something?"
5. ESCALATE WHEN NEEDED: If stuck or the agent is unhelpful, ask for a manager.
6. BE BRIEF: 1-2 sentences max. {tone}

STRATEGIC APPROACH:
- Start by confirming what they need (return/exchange/refund/help).
- For EXCHANGE: "Do you want to exchange for the same item or something else? What if we don't have your size?"
- For RETURN: "Are you looking for a refund or store credit?"
- Always ask: "What if we can't [their preferred option]? What's your backup?"
- If the agent says something isn't available: "I'd like to pause here. Let me see what other options we have before you decide."
- If the agent is evasive or unhelpful: Suggest escalation.

CUSTOMER SETUP INFO:
{context}

CHAT TRANSCRIPT:
{transcript}

INSTRUCTIONS:
- Help resolve their issue, but ALWAYS verify they agree before committing.
- If you sense the agent can't help OR their request isn't available, PAUSE and offer to check other options.
- Your job is to protect the customer from accidentally accepting something they don't want.
- Keep it SHORT. Output 1-2 sentences only.
- If nothing new to add, output: (waiting)

Reply:"""

_FOLLOW_UP_TEMPLATE = """\
You are helping a customer who wants to {issue_type}. Based on their details, generate 2-3 personalized follow-up questions that would help diagnose their situation and get more information.

Customer Details:
- Issue: {issue_type}
- Order #: {order_number}
- Product: {product_details}
- Details: {additional_info}

Generate ONLY 2-3 specific, natural follow-up questions. Format as JSON:
{{
  "followUpQuestions": ["Question 1?", "Question 2?"]
}}"""

_FINAL_QUESTION_TEMPLATE = """\
A customer is trying to {issue_type}. They've provided these details:
- Order: {order_number}
- Product: {product_details}
- Context: {additional_info}

Generate ONE personalized, empathetic question asking what they would prefer if their desired option ({issue_type}) isn't available.
Make it natural and conversational, showing you understand their situation.
Be concise (under 15 words).

Respond ONLY with the question, no quotes or formatting."""


def build_draft_prompt(
    transcript: str,
    user_context: str | None = None,
    provider: str | None = None,
    max_lines: int = DEFAULT_MAX_LINES,
) -> str:
    tone = PROVIDER_TONES.get((provider or "").lower(), DEFAULT_TONE)
    return _DRAFT_TEMPLATE.format(
        tone=tone,
        context=(user_context or "").strip() or NO_CONTEXT,
        transcript=truncate_transcript(transcript, max_lines),
    )


def build_follow_up_prompt(
    issue_type: str,
    order_number: str | None = None,
    product_details: str | None = None,
    additional_info: str | None = None,
) -> str:
    return _FOLLOW_UP_TEMPLATE.format(
        issue_type=issue_type,
        order_number=order_number or "Not provided",
        product_details=product_details or "Not specified",
        additional_info=additional_info or "None provided",
    )


def build_final_question_prompt(
    issue_type: str,
    order_number: str | None = None,
    product_details: str | None = None,
    additional_info: str | None = None,
) -> str:
    return _FINAL_QUESTION_TEMPLATE.format(
        issue_type=issue_type,
        order_number=order_number or "Not provided",
        product_details=product_details or "Not specified",
        additional_info=additional_info or "None",
    )
