"""LangGraph pizza ordering agent graph.

2-node graph: orchestrator -> tools -> orchestrator (loop) -> END.
The orchestrator is a Mistral LLM with the ordering tools bound. The system
prompt is fetched from Langfuse prompt management and compiled with the
session's current store/order context.

Order state does not live in the graph state: the tools read and write the
SessionStore they were built with, so one graph serves one session.
"""

import operator
import re
from functools import lru_cache
from typing import Annotated

from langchain_core.messages import SystemMessage
from langchain_core.tools import BaseTool
from langchain_mistralai import ChatMistralAI
from langfuse import Langfuse
from langgraph.graph import END, START, MessagesState, StateGraph
from langgraph.graph.state import CompiledStateGraph
from langgraph.prebuilt import ToolNode
from loguru import logger

from .client import CommerceClient
from .config import get_settings
from .session import SessionStore
from .tools import build_tools

# ---------------------------------------------------------------------------
# State Schema
# ---------------------------------------------------------------------------


class PizzaAgentState(MessagesState):
    """State for the ordering agent graph.

    Inherits `messages` from MessagesState (with add-message reducer).
    """

    reasoning: Annotated[list[str], operator.add]  # LLM decision rationale log


# ---------------------------------------------------------------------------
# System Prompt (Langfuse)
# ---------------------------------------------------------------------------

PROMPT_NAME = "pizza-agent/orchestrator"

# Fallback prompt used if Langfuse is unavailable (e.g., no API keys configured)
FALLBACK_SYSTEM_PROMPT = """\
You are a friendly pizza ordering assistant. You place real orders with the
store through your tools, so be accurate.

SELECTED STORE: {{selected_store}}

ORDERS IN THIS SESSION:
{{orders}}

RULES:
1. Ask for the customer's address first and call find_nearby_stores.
   Offer the nearest store unless the customer prefers another.
2. Call get_menu for the chosen store before suggesting items. Only use item
   codes and topping codes that appear in the menu.
3. Collect first name, last name, phone, and delivery or carryout, then call
   create_order. Delivery orders need the customer's address.
4. Add each item with add_item_to_order. Use get_order_state to read the
   order back; use the item index from it when removing an item.
5. Call validate_order, then price_order, and read the total to the customer.
   If validation or pricing fails, explain the reason and help fix the order.
6. Only call place_order after the customer confirms the total and payment.
   Card payments need card number, expiration and security code. Tips only
   apply to delivery orders.
7. Use track_order with the customer's phone number and store to check on a
   placed order.
8. Never repeat a full card number back to the customer.
9. ALWAYS start your response with a <reasoning> tag explaining your decision.
   The reasoning tag MUST appear before any other content in your response.\
"""


def _get_system_prompt_template() -> str:
    """Fetch the system prompt template from Langfuse.

    Falls back to FALLBACK_SYSTEM_PROMPT if Langfuse is unavailable
    (no API keys, network error, prompt not seeded yet).

    Returns the raw template string with {{variable}} placeholders.
    """
    settings = get_settings()
    if not settings.langfuse_public_key or not settings.langfuse_secret_key:
        logger.info("Langfuse keys not configured, using fallback system prompt")
        return FALLBACK_SYSTEM_PROMPT

    try:
        langfuse = Langfuse(
            public_key=settings.langfuse_public_key,
            secret_key=settings.langfuse_secret_key,
            host=settings.langfuse_base_url,
        )
        prompt = langfuse.get_prompt(PROMPT_NAME, label="production")
        logger.info("Fetched system prompt from Langfuse: {}", PROMPT_NAME)
        # For chat prompts, extract the system message content
        if isinstance(prompt.prompt, list):
            for msg in prompt.prompt:
                if msg.get("role") == "system":
                    return msg["content"]
        return prompt.prompt
    except Exception:
        logger.opt(exception=True).warning(
            "Failed to fetch prompt from Langfuse, using fallback"
        )
        return FALLBACK_SYSTEM_PROMPT


def render_session_context(session: SessionStore) -> dict[str, str]:
    """Describe the session's store and orders for the system prompt."""
    store = session.selected_store
    if store is not None:
        selected = f"{store.store_id} ({store.address})"
    else:
        selected = session.selected_store_id or "None selected yet"

    lines = []
    for order_id in session.order_ids():
        order = session.get_order(order_id)
        lines.append(
            f"- {order_id}: {order.service_method.value} at store {order.store_id}, "
            f"{len(order.items)} items, {order.lifecycle_state.value}"
        )
    return {"selected_store": selected, "orders": "\n".join(lines) or "None"}


# ---------------------------------------------------------------------------
# LLM (lazy initialization)
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def _get_llm() -> ChatMistralAI:
    """Create the chat model on first use, NOT at import time.

    This lets graph.py be imported and graphs be built without
    MISTRAL_API_KEY being set (important for tests).
    """
    settings = get_settings()
    logger.info(
        "Initializing LLM: model={}, temperature={}",
        settings.mistral_model,
        settings.mistral_temperature,
    )
    return ChatMistralAI(
        model=settings.mistral_model,
        temperature=settings.mistral_temperature,
        api_key=settings.mistral_api_key,
    )


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

_REASONING_PATTERN = re.compile(r"<reasoning>(.*?)</reasoning>", re.DOTALL)


def _extract_reasoning(content: str) -> tuple[str, str]:
    """Extract and strip <reasoning> tags from LLM response content.

    Returns:
        (reasoning_text, cleaned_content): reasoning_text is the extracted
        reasoning (empty string if no tag found), cleaned_content is the
        original content with the <reasoning> tag removed.
    """
    match = _REASONING_PATTERN.search(content)
    if not match:
        return "", content
    reasoning_text = match.group(1).strip()
    cleaned = _REASONING_PATTERN.sub("", content).strip()
    return reasoning_text, cleaned


def make_orchestrator_node(session: SessionStore, tools: list[BaseTool]):
    """Build the orchestrator node for one session's tool set."""

    def orchestrator_node(state: PizzaAgentState) -> dict:
        prompt_template = _get_system_prompt_template()
        context = render_session_context(session)
        system_content = prompt_template.replace(
            "{{selected_store}}", context["selected_store"]
        ).replace("{{orders}}", context["orders"])

        messages = [SystemMessage(content=system_content)] + state["messages"]
        logger.debug("Invoking orchestrator LLM with {} messages", len(messages))
        response = _get_llm().bind_tools(tools).invoke(messages)

        raw_reasoning, cleaned_content = _extract_reasoning(response.content or "")
        if cleaned_content != (response.content or ""):
            response.content = cleaned_content

        if response.tool_calls:
            tool_names = ", ".join(tc["name"] for tc in response.tool_calls)
            logger.info("Orchestrator requesting tools: {}", tool_names)
            if raw_reasoning:
                reasoning_entry = f"[TOOL_CALL] {tool_names}: {raw_reasoning}"
            else:
                # Tool names only; arguments may carry card data
                reasoning_entry = f"[TOOL_CALL] {tool_names}"
        else:
            logger.info("Orchestrator responding directly (no tool calls)")
            snippet = raw_reasoning or (response.content or "")[:80]
            reasoning_entry = f"[DIRECT] {snippet}"

        logger.debug("Reasoning: {}", reasoning_entry)
        return {"messages": [response], "reasoning": [reasoning_entry]}

    return orchestrator_node


def should_continue(state: PizzaAgentState) -> str:
    """Route to "tools" when the LLM asked for tool calls, else "respond"."""
    last_message = state["messages"][-1]
    if getattr(last_message, "tool_calls", None):
        logger.debug("should_continue -> tools ({} calls)", len(last_message.tool_calls))
        return "tools"
    logger.debug("should_continue -> respond")
    return "respond"


# ---------------------------------------------------------------------------
# Graph Construction
# ---------------------------------------------------------------------------


def build_graph_builder(session: SessionStore, client: CommerceClient) -> StateGraph:
    tools = build_tools(session, client)

    builder = StateGraph(PizzaAgentState)
    builder.add_node("orchestrator", make_orchestrator_node(session, tools))
    builder.add_node("tools", ToolNode(tools))

    builder.add_edge(START, "orchestrator")
    builder.add_conditional_edges(
        "orchestrator",
        should_continue,
        {
            "tools": "tools",
            "respond": END,
        },
    )
    builder.add_edge("tools", "orchestrator")
    return builder


def create_graph(
    session: SessionStore, client: CommerceClient, checkpointer=None
) -> CompiledStateGraph:
    """Compile the agent graph for one session."""
    return build_graph_builder(session, client).compile(checkpointer=checkpointer)
