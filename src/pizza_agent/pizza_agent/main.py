"""CLI entry point for the pizza ordering agent.

Usage:
    pizza-agent
    python -m pizza_agent.main
"""

import json

from langchain_core.messages import HumanMessage, ToolMessage
from langgraph.checkpoint.memory import MemorySaver
from loguru import logger

from .client import DominosClient
from .config import get_settings
from .graph import create_graph
from .logging import setup_logging
from .session import SessionStore


def _create_langfuse_handler():
    """Create a Langfuse callback handler if credentials are configured.

    Returns None if Langfuse is not configured.
    """
    settings = get_settings()
    if not settings.langfuse_public_key or not settings.langfuse_secret_key:
        return None

    from langfuse import Langfuse
    from langfuse.langchain import CallbackHandler

    # Initialize the Langfuse singleton client with credentials
    Langfuse(
        public_key=settings.langfuse_public_key,
        secret_key=settings.langfuse_secret_key,
        host=settings.langfuse_base_url,
    )

    return CallbackHandler()


def _flush_langfuse(handler) -> None:
    if handler:
        from langfuse import get_client

        get_client().flush()


def _order_placed(messages) -> bool:
    """True if the latest tool batch contains a successful place_order call."""
    for msg in reversed(messages):
        if isinstance(msg, ToolMessage) and msg.name == "place_order":
            if msg.status == "error":
                return False
            try:
                return json.loads(msg.content).get("status") == "placed"
            except (TypeError, ValueError, AttributeError):
                return False
        # Stop scanning once we hit an AIMessage (only check recent batch)
        if hasattr(msg, "tool_calls"):
            break
    return False


def main() -> None:
    """Run the pizza ordering CLI."""
    settings = get_settings()

    session = SessionStore()
    setup_logging(level=settings.log_level, session_id=session.session_id)
    logger.info("Starting pizza ordering CLI")

    client = DominosClient.from_settings(settings)
    graph = create_graph(session, client, checkpointer=MemorySaver())

    config = {"configurable": {"thread_id": session.session_id}}
    logger.info("Session started (session_id={})", session.session_id)

    # Attach Langfuse callback handler if available
    langfuse_handler = _create_langfuse_handler()
    if langfuse_handler:
        config["callbacks"] = [langfuse_handler]
        config["metadata"] = {"langfuse_session_id": session.session_id}
        logger.info("Langfuse tracing enabled (session_id={})", session.session_id)
        print(f"Langfuse tracing: enabled (session_id={session.session_id})")
    else:
        logger.info("Langfuse tracing disabled (no credentials)")
        print("Langfuse tracing: disabled (no credentials)")

    print("-" * 50)
    print("Pizza ordering assistant ready! Type 'quit' to exit.")
    print("-" * 50)
    print()

    result = graph.invoke({"messages": [HumanMessage(content="Hi")]}, config=config)
    print(f"Bot: {result['messages'][-1].content}")
    print()

    while True:
        try:
            user_input = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            break

        if not user_input:
            continue
        if user_input.lower() in ("quit", "exit", "q"):
            print("Goodbye!")
            break

        logger.debug("User input received ({} chars)", len(user_input))
        result = graph.invoke(
            {"messages": [HumanMessage(content=user_input)]},
            config=config,
        )

        last_msg = result["messages"][-1]
        logger.debug("Bot response: {}", str(last_msg.content)[:100])
        print(f"Bot: {last_msg.content}")
        print()

        # Keep the session open after placement so the customer can track
        if _order_placed(result["messages"]):
            logger.info("Order placed in session {}", session.session_id)
            print("-" * 50)
            print("Order placed! Ask me to track it any time.")
            print("-" * 50)
            print()

    _flush_langfuse(langfuse_handler)
    logger.info("Session ended (session_id={})", session.session_id)


if __name__ == "__main__":
    main()
