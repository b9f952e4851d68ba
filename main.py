import argparse
import asyncio
import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from config.config import Config
from models.comparison_result import ComparisonReport
from models.errors import CodeSearchError, RateLimited
from orchestrator.core import CodeSearchOrchestrator, SearchOutcome
from orchestrator.pattern_comparator import PatternFilters


def show_loading_animation(stop_event: threading.Event, label: str = "Searching") -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
        label: Text shown before the spinner
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stdout.write(f'\r\033[93m{label} {char}\033[0m')
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write('\r' + ' ' * (len(label) + 4) + '\r')
    sys.stdout.flush()


def print_outcome(outcome: SearchOutcome) -> None:
    plan = outcome.plan
    print(f"\nTarget:  {plan.target.value}")
    print(f"Query:   {plan.query_string or '-'}")
    print(f"Intent:  {plan.intent}")
    if plan.quality:
        print(f"Quality: {plan.quality}")

    if not plan.is_searchable:
        print(f"\n{plan.assessment}\n")
        return

    print(f"Total matches: {outcome.total_count}\n")

    for repo in outcome.repositories:
        print(f"* {repo.full_name}  ({repo.stars} stars, {repo.language or 'n/a'})")
        if repo.description:
            print(f"  {repo.description}")
        print(f"  {repo.html_url}")

    for result in outcome.results:
        status = "" if result.is_fetched else f"  [{result.fetch_status.value}]"
        print(f"* {result.repository.full_name}/{result.path}{status}")
        print(f"  {result.html_url}")
        for line in result.snippet.code.splitlines():
            print(f"    {line}")
        print()


def print_report(report: ComparisonReport) -> None:
    print(f"\nQuery:   {report.query_string}")
    print(f"Total matches: {report.total_count}\n")

    if not report.results:
        print("No comparable files found.\n")
        return

    for result in report.results:
        analysis = result.analysis
        print(f"* {result.repository.full_name}/{result.path}  (similarity {analysis.similarity_score})")
        if result.html_url:
            print(f"  {result.html_url}")
        print(f"  Insights:       {analysis.insights}")
        print(f"  Approach:       {analysis.implementation_approach}")
        print(f"  Best practices: {analysis.best_practices}")
        print()


def run_with_spinner(label: str, func, *args, **kwargs):
    # Show loading animation in a separate thread
    stop_animation = threading.Event()
    loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation, label))
    loading_thread.daemon = True
    loading_thread.start()

    try:
        return func(*args, **kwargs)
    finally:
        stop_animation.set()
        loading_thread.join()


def run_query(orchestrator: CodeSearchOrchestrator, query: str, limit: int | None) -> None:
    outcome = run_with_spinner("Searching", orchestrator.search_sync, query, limit=limit)
    print_outcome(outcome)


def run_pattern(orchestrator: CodeSearchOrchestrator, args: argparse.Namespace) -> None:
    with open(args.pattern, encoding="utf-8") as f:
        snippet = f.read()

    filters = PatternFilters(repo=args.repo, user=args.user, stars=args.stars, forks=args.forks)
    report = run_with_spinner(
        "Comparing",
        orchestrator.analyze_pattern_sync,
        snippet,
        language=args.language,
        filters=filters,
        limit=args.limit,
    )
    print_report(report)


def print_rate_limit(error: RateLimited) -> None:
    retry_after = error.retry_after_seconds()
    wait = f" Try again in {retry_after}s." if retry_after is not None else ""
    print(f"\nGitHub rate limit exceeded.{wait}")


async def interactive_session(orchestrator: CodeSearchOrchestrator, limit: int | None) -> None:
    """Read queries until exit; all searches share one event loop and one GitHub connection pool."""
    loop = asyncio.get_running_loop()

    print("\n=== Code Search ===")
    print("Type 'exit' to quit or 'help' for commands\n")

    try:
        while True:
            try:
                user_input = (await loop.run_in_executor(None, input, "Search: ")).strip()
            except (KeyboardInterrupt, EOFError):
                print("\nExiting...")
                break

            if not user_input:
                continue

            if user_input.lower() in ('exit', 'quit'):
                print("\nGoodbye!")
                break

            if user_input.lower() == 'help':
                print("\n=== Available Commands ===")
                print("help      - Show this help message")
                print("exit/quit - Exit the program")
                print("Anything else is run as a search query\n")
                continue

            stop_animation = threading.Event()
            loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation,))
            loading_thread.daemon = True
            loading_thread.start()

            try:
                outcome = await orchestrator.search(user_input, limit=limit)
            except CodeSearchError as e:
                stop_animation.set()
                loading_thread.join()
                if isinstance(e, RateLimited):
                    print_rate_limit(e)
                else:
                    print(f"\nError: {e.message}")
                continue

            stop_animation.set()
            loading_thread.join()
            print_outcome(outcome)
    finally:
        await orchestrator.aclose()


def main():
    parser = argparse.ArgumentParser(description="Natural-language GitHub code search")
    parser.add_argument("query", nargs="*", help="Run a single query and exit")
    parser.add_argument("--limit", type=int, default=None, help="Number of results to fetch in full")
    parser.add_argument("--pattern", metavar="FILE", help="Compare the code in FILE against GitHub code")
    parser.add_argument("--language", help="Language of the pattern file")
    parser.add_argument("--repo", help="Restrict pattern search to owner/repo")
    parser.add_argument("--user", help="Restrict pattern search to a user or organization")
    parser.add_argument("--stars", type=int, default=None, help="Minimum repository stars")
    parser.add_argument("--forks", type=int, default=None, help="Minimum repository forks")
    args = parser.parse_args()

    config = Config()
    if not config.validate():
        print("Error: configuration incomplete, check your .env file")
        return

    try:
        orchestrator = CodeSearchOrchestrator.from_config(config)
    except ValueError as e:
        print(f"Error initializing search: {str(e)}")
        return

    print(f"Using {config.get_model_info()}")

    if not args.query and not args.pattern:
        asyncio.run(interactive_session(orchestrator, args.limit))
        return

    try:
        if args.pattern:
            run_pattern(orchestrator, args)
        else:
            run_query(orchestrator, " ".join(args.query), args.limit)
    except RateLimited as e:
        print_rate_limit(e)
    except CodeSearchError as e:
        print(f"\nError: {e.message}")
    except OSError as e:
        print(f"Error reading pattern file: {e}")
    finally:
        orchestrator.close_sync()


if __name__ == "__main__":
    main()
