# =============================================================================
# main.py  —  Entry Point for the Relate Account identity agent
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Creates the Google ADK agent (relate_agent/relate_agent.py)
#   2. The agent launches the MCP server (relate_mcp/mcp_server.py) over stdio
#   3. Each question you type is sent to the agent
#   4. Tool calls are printed as they happen; the final answer is shown
#
# EXAMPLE QUESTIONS:
#   "Which accounts belong to vitalik.eth?"
#   "What address does dwr.eth resolve to, and is it on Farcaster?"
#
# Asking about the same identity twice in one session hits the server's
# cache: the second answer costs no upstream request.
# =============================================================================

import asyncio

from dotenv import load_dotenv

# Load environment variables from .env (OPENROUTER_API_KEY, DATA_API_URL,
# ACCESS_TOKEN, ...) BEFORE creating the agent: LiteLlm reads its API key
# at initialization, and the server subprocess inherits DATA_API_URL etc.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from relate_agent.relate_agent import create_agent


APP_NAME = "relate_account"
USER_ID = "demo_user"


async def run_agent():
    """Run the identity research agent interactively."""

    # =========================================================================
    # Step 1: Create the agent, runner and session
    # =========================================================================
    print("=" * 70)
    print("  RELATE ACCOUNT — CROSS-PLATFORM IDENTITY AGENT")
    print("  Powered by Google ADK + LiteLlm + FastMCP")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent()

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(
        app_name=APP_NAME,
        user_id=USER_ID,
    )

    print("✅ Agent initialized and ready!\n")

    # =========================================================================
    # Step 2: Interactive loop
    # =========================================================================
    print("💬 Ask about any ENS name, address, Farcaster or Lens handle...")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(
            role="user",
            parts=[types.Part(text=user_input)],
        )

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        # =====================================================================
        # Step 3: Stream events; print tool calls, keep the last text part
        # =====================================================================
        final_response = ""

        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text

                    if getattr(part, "function_call", None):
                        call = part.function_call
                        print(f"  🔧 Calling tool: {call.name} {dict(call.args or {})}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


if __name__ == "__main__":
    asyncio.run(run_agent())
