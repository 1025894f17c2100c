"""
Chat assistant service using the OpenAI Chat Completions API.
Builds a compact summary of the user's transactions and budgets as the
system prompt and streams the model's answer back as text.
"""
from datetime import date
from decimal import Decimal
from typing import AsyncIterator, Dict, List, Optional, Sequence
import json
import logging
import httpx
from sqlalchemy.orm import Session
from app.core.config import settings
from app.models.budget import GroupBudget
from app.models.transaction import Transaction, TransactionType
from app.services.budget_service import transaction_value

logger = logging.getLogger(__name__)

TOP_CATEGORY_COUNT = 5

GUIDELINES = """Guidelines:
- When discussing amounts, use the currency shown in the data
- If asked about budgets, compare spending against the budget limits listed above
- Be specific with numbers when answering questions
- If the data doesn't contain enough info to answer, say so honestly
- Keep responses concise: 2-3 sentences for simple questions, more for detailed analysis"""


def get_recent_transactions(
    user_id: int,
    db: Session,
    group_id: Optional[int] = None,
    limit: Optional[int] = None
) -> List[Transaction]:
    """Most recent transactions of a user, newest first."""
    query = db.query(Transaction).filter(Transaction.user_id == user_id)
    if group_id:
        query = query.filter(Transaction.group_id == group_id)
    return query.order_by(
        Transaction.date.desc(), Transaction.id.desc()
    ).limit(limit or settings.CHAT_TRANSACTION_LIMIT).all()


def get_current_budgets(group_id: int, db: Session, today: Optional[date] = None) -> List[GroupBudget]:
    """Budgets of a group for the current month."""
    today = today or date.today()
    return db.query(GroupBudget).filter(
        GroupBudget.group_id == group_id,
        GroupBudget.month == today.month,
        GroupBudget.year == today.year
    ).order_by(GroupBudget.category).all()


def _plain(value) -> str:
    """Decimal without trailing zeros, e.g. 40.00 -> '40'."""
    return format(Decimal(value).normalize(), "f")


def describe_transaction(t) -> str:
    line = f"{t.date.isoformat()} | {getattr(t.type, 'value', t.type)} | {_plain(t.amount)} {t.currency}"
    if t.converted_amount:
        line += f" (={_plain(t.converted_amount)} {t.converted_currency})"
    return f"{line} | {t.merchant} | {t.category or 'No budget'}"


def build_system_prompt(
    transactions: Sequence,
    budgets: Sequence = (),
    today: Optional[date] = None,
    product: Optional[str] = None
) -> str:
    """
    System prompt with this month's totals, top spending categories, the
    current budgets and one line per transaction.
    """
    today = today or date.today()
    product = product or settings.REPORT_PRODUCT_NAME

    this_month = [t for t in transactions if t.date.year == today.year and t.date.month == today.month]
    total_expenses = sum(
        (transaction_value(t, use_converted=True) for t in this_month if t.type == TransactionType.EXPENSE),
        Decimal(0)
    )
    total_income = sum(
        (transaction_value(t, use_converted=True) for t in this_month if t.type == TransactionType.INCOME),
        Decimal(0)
    )

    category_spend: Dict[str, Decimal] = {}
    for t in this_month:
        if t.type != TransactionType.EXPENSE:
            continue
        name = t.category or "Uncategorized"
        category_spend[name] = category_spend.get(name, Decimal(0)) + transaction_value(t, use_converted=True)
    top = sorted(category_spend.items(), key=lambda item: item[1], reverse=True)[:TOP_CATEGORY_COUNT]
    top_categories = ", ".join(f"{name}: {amount:.2f}" for name, amount in top)

    budget_summary = ""
    if budgets:
        budget_summary = "\n\nCurrent month budgets:\n" + "\n".join(
            f"- {b.category}: {_plain(b.amount_limit)} {b.currency}" for b in budgets
        )

    tx_lines = "\n".join(describe_transaction(t) for t in transactions)

    return f"""You are a helpful personal finance assistant for the app {product}. You have access to the user's transaction data and should answer questions about their spending, budgets, and financial habits. Be concise, friendly, and insightful.

This month's summary:
- Total expenses: {total_expenses:.2f}
- Total income: {total_income:.2f}
- Net: {total_income - total_expenses:.2f}
- Top spending categories: {top_categories or "None yet"}{budget_summary}

Recent transactions (up to {settings.CHAT_TRANSACTION_LIMIT}, newest first):
{tx_lines or "No transactions found."}

{GUIDELINES}"""


def build_chat_payload(system_prompt: str, messages: Sequence) -> dict:
    """Request body for a streamed chat completion."""
    return {
        "model": settings.OPENAI_MODEL,
        "messages": [{"role": "system", "content": system_prompt}] + [
            {"role": m.role, "content": m.content} for m in messages
        ],
        "stream": True,
        "max_tokens": settings.CHAT_MAX_TOKENS,
    }


def parse_stream_line(line: str) -> Optional[str]:
    """
    Text delta carried by one server-sent event line, if any.
    Lines look like 'data: {"choices": [{"delta": {"content": "Hi"}}]}'
    and the stream ends with 'data: [DONE]'.
    """
    if not line.startswith("data:"):
        return None
    data = line[len("data:"):].strip()
    if not data or data == "[DONE]":
        return None
    try:
        chunk = json.loads(data)
    except json.JSONDecodeError:
        logger.warning(f"Skipping malformed stream chunk: {data[:80]}")
        return None
    choices = chunk.get("choices") or [{}]
    return (choices[0].get("delta") or {}).get("content") or None


async def open_chat_stream(payload: dict) -> AsyncIterator[str]:
    """
    Send a streamed completion request and return an iterator over the answer text.

    The request is made and its status checked before anything is returned,
    so callers can still answer with an error status.

    Raises:
        ValueError: when the API cannot be reached or rejects the request
    """
    headers = {
        "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
        "Content-Type": "application/json"
    }
    client = httpx.AsyncClient(timeout=60.0)
    try:
        request = client.build_request("POST", settings.OPENAI_API_URL, headers=headers, json=payload)
        response = await client.send(request, stream=True)
    except httpx.TimeoutException:
        await client.aclose()
        logger.error("OpenAI API request timed out")
        raise ValueError("Chat completion request timed out")
    except httpx.HTTPError as e:
        await client.aclose()
        logger.error(f"Error calling chat completion API: {e}", exc_info=True)
        raise ValueError(f"Chat completion network error: {str(e)}")
    
    if response.status_code != 200:
        body = await response.aread()
        await response.aclose()
        await client.aclose()
        logger.error(f"OpenAI API error {response.status_code}: {body[:500]!r}")
        raise ValueError(f"Chat completion API error: {response.status_code}")
    
    return _iter_answer(client, response)


async def _iter_answer(client: httpx.AsyncClient, response: httpx.Response) -> AsyncIterator[str]:
    try:
        async for line in response.aiter_lines():
            text = parse_stream_line(line)
            if text:
                yield text
    except httpx.HTTPError as e:
        # Status line already sent; the answer ends early
        logger.error(f"Chat completion stream interrupted: {e}")
    finally:
        await response.aclose()
        await client.aclose()
