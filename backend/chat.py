import argparse
import logging
import sys
import threading
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters import list_backend_providers
from config import find_config_path, load_config, resolve_backend_settings
from errors import EmbeddingError, GenerationError
from pipelines import QueryOrchestrator

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  history                   show the conversation so far
  switch <provider> [model] change the generation backend
  providers                 list supported providers
  backend                   show the active backend
  clear                     clear the screen
  exit | quit               leave the chat"""


def print_history(orchestrator: QueryOrchestrator) -> None:
    turns = orchestrator.session.history()
    print(f"\nConversation history ({len(turns)} messages):\n")
    for turn in turns:
        speaker = "You" if turn.role.value == "user" else f"Bot [{turn.backend}]"
        print(f"{speaker} ({turn.created_at.astimezone():%H:%M:%S}): {turn.content}")
    print()


def switch_backend(orchestrator: QueryOrchestrator, config: dict, args: list[str]) -> None:
    if not args:
        print("Usage: switch <provider> [model]")
        return
    settings = resolve_backend_settings(
        config, provider=args[0], model=args[1] if len(args) > 1 else None
    )
    try:
        handle = orchestrator.session.switch_backend(**settings)
    except ValueError as e:
        print(f"Could not switch backend: {e}")
        return
    print(f"Now using {handle.identifier}")


def ask(orchestrator: QueryOrchestrator, question: str) -> None:
    cancel = threading.Event()
    try:
        answer = orchestrator.answer(question, cancel=cancel)
    except KeyboardInterrupt:
        cancel.set()
        print("\nRequest cancelled.\n")
        return
    except (GenerationError, EmbeddingError) as e:
        print(f"\nError: {e}\n")
        return
    print(f"\nBot: {answer}\n")


def run_interactive(orchestrator: QueryOrchestrator, config: dict) -> None:
    print(f"RagChat - backend {orchestrator.session.active_handle.identifier}")
    print("Type 'help' for commands.\n")

    while True:
        try:
            line = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        command, *rest = line.split()
        command = command.lower()

        if command in ("exit", "quit"):
            print("Goodbye!")
            break
        elif command == "help":
            print(HELP_TEXT)
        elif command == "history":
            print_history(orchestrator)
        elif command == "clear":
            print("\033[H\033[2J", end="")
        elif command == "providers":
            print(", ".join(list_backend_providers()))
        elif command == "backend":
            print(orchestrator.session.active_handle.identifier)
        elif command == "switch":
            switch_backend(orchestrator, config, rest)
        else:
            ask(orchestrator, line)


def main():
    parser = argparse.ArgumentParser(description="Chat with retrieval-augmented answers")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.toml in project root)",
    )
    parser.add_argument("--provider", default=None, help="Override [llm] provider")
    parser.add_argument("--model", default=None, help="Override [llm] model")
    parser.add_argument(
        "--no-retrieval",
        action="store_true",
        help="Plain conversation without document context",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config_path = find_config_path(args.config)
        config = load_config(config_path)
        orchestrator = QueryOrchestrator.from_config(
            config,
            config_path,
            retrieval=False if args.no_retrieval else None,
            provider=args.provider,
            model=args.model,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Startup failed: {e}")
        return 1

    retriever = orchestrator.retriever
    if retriever is not None and retriever.vector_store.count == 0:
        logger.warning("Vector store is empty; run ingest.py to add documents")

    try:
        run_interactive(orchestrator, config)
    finally:
        orchestrator.session.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
