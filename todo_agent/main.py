"""Console entry point: run one prompt against a fresh session."""

import asyncio
import logging
import sys

from todo_agent.config import settings
from todo_agent.session import AgentSession
from todo_agent.tools import extract_images

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


async def _progress(tool_name: str) -> None:
    print(f"  … {tool_name}")


async def run(prompt: str) -> int:
    session = AgentSession()
    logger.info("Session %s using model %s", session.session_id, settings.chat_model)

    report = await session.ask(prompt, on_progress=_progress)

    print("\nTasks:")
    for todo in await session.get_tasks():
        print(f"  {todo.id}. [{todo.status_badge}] {todo.description} ({todo.duration_display})")
        if todo.completion_notes:
            print(f"     {todo.completion_notes}")

    text, images = extract_images(report)
    print(f"\n{text}")
    if images:
        print(f"\n({len(images)} image(s) generated)")
    return 1 if report.startswith("Error processing request:") else 0


def main() -> None:
    """Read the prompt from argv and print the agent's report."""
    prompt = " ".join(sys.argv[1:]).strip()
    if not prompt:
        print('usage: todo-agent "<request>"', file=sys.stderr)
        sys.exit(2)
    try:
        sys.exit(asyncio.run(run(prompt)))
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
