import argparse
import asyncio
import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from config.config import Config
from models.messages import Context, Message, Role
from models.outcomes import Answer
from orchestrator.core import AnswerOrchestrator, user_message


def show_loading_animation(stop_event: threading.Event) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stdout.write(f'\r\033[93mMencari jawaban {char}\033[0m')
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write('\r' + ' ' * 30 + '\r')
    sys.stdout.flush()


async def answer_with_animation(orchestrator: AnswerOrchestrator, messages: list[Message], context: Context):
    stop_animation = threading.Event()
    loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation,))
    loading_thread.daemon = True
    loading_thread.start()
    try:
        return await orchestrator.answer(messages, context)
    finally:
        stop_animation.set()
        loading_thread.join()


def list_models(orchestrator: AnswerOrchestrator) -> None:
    print("\n=== Model Pool (in fallback order) ===")
    for position, candidate in enumerate(orchestrator.pool.candidates(), start=1):
        print(f"{position:2d}. {candidate}")
    print()


async def chat(orchestrator: AnswerOrchestrator, context: Context) -> None:
    conversation: list[Message] = []

    print(f"\n=== Haditha ({context.value}) ===")
    print("Ketik 'exit' untuk keluar, 'reset' untuk memulai percakapan baru, atau 'help'\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "Anda: ")).strip()
        except (KeyboardInterrupt, EOFError):
            print("\nKeluar...")
            break

        if not user_input:
            continue

        if user_input.lower() in ('exit', 'quit'):
            print("\nWassalamu'alaikum!")
            break

        if user_input.lower() == 'reset':
            conversation.clear()
            print("\nPercakapan dikosongkan.\n")
            continue

        if user_input.lower() == 'help':
            print("\n=== Perintah ===")
            print("help      - Tampilkan bantuan ini")
            print("reset     - Mulai percakapan baru")
            print("models    - Tampilkan daftar model")
            print("exit/quit - Keluar\n")
            continue

        if user_input.lower() == 'models':
            list_models(orchestrator)
            continue

        pending = [*conversation, Message(role=Role.USER, content=user_input)]
        outcome = await answer_with_animation(orchestrator, pending, context)

        if isinstance(outcome, Answer):
            conversation = [*pending, Message(role=Role.ASSISTANT, content=outcome.text)]
            print(f"\nHaditha: {outcome.text}")
            print(f"[model: {outcome.model}, percobaan: {len(outcome.attempts)}]\n")
        else:
            print(f"\n{user_message(outcome)}\n")


async def run(args, config: Config) -> int:
    orchestrator = AnswerOrchestrator.from_config(config)
    context = Context(args.context)
    try:
        if args.list_models:
            list_models(orchestrator)
            return 0

        if not config.validate():
            print("Error: OPENROUTER_API_KEY is not set. Please set it in the .env file.")
            return 1

        if args.question:
            outcome = await answer_with_animation(
                orchestrator, [Message(role=Role.USER, content=args.question)], context
            )
            print(user_message(outcome))
            return 0 if isinstance(outcome, Answer) else 2

        await chat(orchestrator, context)
        return 0
    finally:
        await orchestrator.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Haditha religious question answering")
    parser.add_argument("question", nargs="?", help="Ask one question and exit")
    parser.add_argument(
        "--context",
        choices=[c.value for c in Context],
        default=Context.SYARIAH.value,
        help="Answer as syariah guidance or historical narrative",
    )
    parser.add_argument("--list-models", action="store_true", help="Print the model pool and exit")
    args = parser.parse_args(argv)

    return asyncio.run(run(args, Config()))


if __name__ == "__main__":
    sys.exit(main())
