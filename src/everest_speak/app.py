"""Interactive CLI application."""
import logging
from datetime import date

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt, IntPrompt, Confirm

from everest_speak.catalog import categories, filter_by_category, load_catalog_or_default
from everest_speak.config import Settings, load_settings, setup_logging
from everest_speak.dashboard import get_branch_rankings, get_user_summary
from everest_speak.db import init_db
from everest_speak.ledger import LedgerError, RewardLedger, authenticate, create_user, find_user_by_name
from everest_speak.models import MissionState, Outcome
from everest_speak.monthly import MonthlyTest, build_monthly_test, is_last_day_of_month
from everest_speak.seed import list_branches, seed_all
from everest_speak.session import open_session
from everest_speak.tracker import CaptureInProgressError, MissionTracker

logger = logging.getLogger(__name__)

console = Console()

EXIT_WORDS = ("q", "menu")

STATE_STYLE = {
    MissionState.READY: "[cyan]Ready[/cyan]",
    MissionState.COMPLETED: "[green]Completed[/green]",
    MissionState.LOCKED: "[red]Locked[/red]",
}


class SessionExitRequested(Exception):
    """User typed q/menu in the middle of a practice session."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def show_welcome(user_name: str):
    console.print(Panel(
        f"[bold]Everest Speak[/bold]\n[dim]Korean for the hall and the kitchen[/dim]\n\nNamaste, {user_name}!",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("missions", "Today's missions"),
        ("phrases", "Browse phrases by category"),
        ("test", "Monthly review test"),
        ("points", "Your points and progress"),
        ("rankings", "Branch rankings"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_phrase(phrase, title: str, border_style: str = "cyan"):
    body = f"[bold]{phrase.source_text}[/bold]"
    if phrase.phonetic:
        body += f"\n[dim]{phrase.phonetic}[/dim]"
    if phrase.gloss:
        body += f"\n{phrase.gloss}"
    console.print(Panel(body, title=title, border_style=border_style))


def login(db_path: str):
    """Sign in, or register when the name is new. Returns None on a bad password."""
    name = Prompt.ask("Your name").strip()
    password = Prompt.ask("Password", password=True)
    if find_user_by_name(db_path, name):
        user = authenticate(db_path, name, password)
        if user is None:
            console.print("[red]Wrong name or password.[/red]")
        return user
    if not password:
        console.print("[red]Choose a password to register.[/red]")
        return None
    branches = list_branches(db_path)
    for b in branches:
        console.print(f"  [cyan]{b['id']}[/cyan]) {b['name']}")
    branch_id = IntPrompt.ask("Select your branch", choices=[str(b["id"]) for b in branches])
    return create_user(db_path, name, branch_id, password=password)


def run_mission_session(tracker: MissionTracker) -> None:
    statuses = tracker.session.statuses
    if not statuses:
        console.print("[yellow]No missions today. The phrase list is empty.[/yellow]")
        return
    done = sum(1 for s in statuses if s.state is not MissionState.READY)
    console.print(f"\n[bold]Today's Missions[/bold] — {done}/{len(statuses)} finished\n")
    for i, status in enumerate(statuses, 1):
        show_phrase(status.phrase, f"Mission {i}/{len(statuses)}")
        if status.state is not MissionState.READY:
            console.print(STATE_STYLE[status.state])
            continue
        while status.state is MissionState.READY:
            try:
                tracker.begin_capture(status.phrase)
            except CaptureInProgressError as exc:
                console.print(f"[yellow]{exc}[/yellow]")
                return
            try:
                transcript = session_prompt("Say it (type what you said, q to stop)")
            except SessionExitRequested:
                tracker.cancel_capture()
                raise
            result = tracker.finish_capture(transcript)
            if result.outcome is Outcome.SUCCESS:
                console.print("[green]Great![/green]")
                if result.awarded:
                    console.print(f"[bold green]+{result.awarded} points[/bold green] (total {result.points})")
                elif result.message:
                    console.print(f"[dim]{result.message}[/dim]")
            elif result.outcome is Outcome.RETRY:
                console.print(f"[yellow]Try again.[/yellow] Target: [bold]{status.phrase.source_text}[/bold] "
                              f"({result.attempts_remaining} left)")
            else:
                console.print("[red]No attempts left for this mission today.[/red]")
            if result.warning:
                console.print(f"[dim yellow]{result.warning}[/dim yellow]")
        console.print()


def run_test_session(test: MonthlyTest) -> tuple[int, int]:
    console.print(f"\n[bold]Monthly Test[/bold] — {len(test.questions)} questions\n")
    for i, phrase in enumerate(test.questions):
        console.print(Panel(f"{phrase.gloss}\n[dim]{phrase.phonetic}[/dim]", title=f"Q{i + 1}", border_style="cyan"))
        while test.is_open(i):
            transcript = session_prompt("Say it in Korean")
            if test.answer(i, transcript):
                console.print("[green]Correct![/green]")
            elif test.is_open(i):
                console.print("[yellow]Not quite, one more try.[/yellow]")
            else:
                console.print(f"[red]Incorrect.[/red] Answer: [green]{phrase.source_text}[/green]")
        console.print()
    correct = sum(test.correct)
    console.print(f"[bold]Score: {correct}/{len(test.questions)} ({test.score:.0f}%) {test.result}[/bold]\n")
    return correct, len(test.questions)


def cmd_missions(settings: Settings, catalog, user, ledger: RewardLedger):
    session = open_session(settings.db_path, user.id, catalog, mission_count=settings.mission_count)
    run_mission_session(MissionTracker(session, ledger))


def cmd_phrases(catalog):
    cats = categories(catalog)
    for i, cat in enumerate(cats):
        console.print(f"  [cyan]{i}[/cyan]) {cat}")
    choice = IntPrompt.ask("Category", choices=[str(i) for i in range(len(cats))], default=0)
    table = Table(title=cats[choice])
    table.add_column("Situation", style="cyan")
    table.add_column("Korean")
    table.add_column("Pronunciation", style="dim")
    table.add_column("Meaning")
    for p in filter_by_category(catalog, cats[choice]):
        table.add_row(p.situation, p.source_text, p.phonetic, p.gloss)
    console.print(table)


def cmd_test(settings: Settings, catalog, user, ledger: RewardLedger):
    today = date.today()
    official = is_last_day_of_month(today)
    if not official:
        console.print("[dim]The monthly test opens on the last day of the month.[/dim]")
        if not Confirm.ask("Take a practice test now?", default=False):
            return
    test = build_monthly_test(catalog, today, count=settings.mission_count)
    if not test.questions:
        console.print("[yellow]No missions yet this month, nothing to review.[/yellow]")
        return
    run_test_session(test)
    if official:
        try:
            test.submit(ledger, user.id)
            console.print("[green]Result saved.[/green]")
        except LedgerError as exc:
            logger.warning("Monthly test for user %s not saved: %s", user.id, exc)
            console.print(f"[yellow]Result could not be saved: {exc}[/yellow]")


def cmd_points(settings: Settings, user):
    summary = get_user_summary(settings.db_path, user.id)
    console.print(Panel(f"[bold]{summary['points']}[/bold] points", title=user.name, border_style="blue"))
    console.print(f"  Reward days: [bold]{summary['reward_days']}[/bold]  |  "
                  f"Missions completed: [bold]{summary['missions_completed']}[/bold]  |  "
                  f"Missions failed: [bold]{summary['missions_failed']}[/bold]")
    test = summary["latest_test"]
    if test:
        color = "green" if test["result"] == "PASS" else "red"
        console.print(f"  Last monthly test ({test['month']}): [{color}]{test['score']:.0f}% {test['result']}[/{color}]")


def cmd_rankings(settings: Settings):
    table = Table(title="Branch Rankings")
    table.add_column("#", justify="right")
    table.add_column("Branch", style="cyan")
    table.add_column("Points", justify="right")
    table.add_column("Staff", justify="right")
    for i, row in enumerate(get_branch_rankings(settings.db_path), 1):
        table.add_row(str(i), row["branch_name"], str(row["total_points"]), str(row["user_count"]))
    console.print(table)


def main():
    settings = load_settings()
    setup_logging(settings.log_level)
    init_db(settings.db_path)
    seed_all(settings.db_path)
    catalog = load_catalog_or_default(settings.catalog_path)
    ledger = RewardLedger(settings.db_path)

    user = None
    while user is None:
        user = login(settings.db_path)
    show_welcome(user.name)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="missions").strip().lower()
        try:
            if choice == "missions":
                cmd_missions(settings, catalog, user, ledger)
            elif choice == "phrases":
                cmd_phrases(catalog)
            elif choice == "test":
                cmd_test(settings, catalog, user, ledger)
            elif choice == "points":
                cmd_points(settings, user)
            elif choice == "rankings":
                cmd_rankings(settings)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Dhanyabaad! See you tomorrow.[/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Back to the menu. Your progress is saved.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception("Command %s failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
