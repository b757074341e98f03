"""Interactive CLI application."""
import logging
import os
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from dsa_tutor.catalog import get_problem, search_problems
from dsa_tutor.db import DEFAULT_DB_PATH, init_db
from dsa_tutor.errors import TutorError
from dsa_tutor.importer import import_file
from dsa_tutor.mistakes import list_mistakes, record_mistake
from dsa_tutor.models import DIFFICULTIES, RECALL_DIFFICULTIES
from dsa_tutor.planner import generate_plan, get_day_progress, get_schedule
from dsa_tutor.progress import complete_problem, get_progress, record_attempt
from dsa_tutor.revision import start_session
from dsa_tutor.scheduler import get_due, revision_forecast
from dsa_tutor.seed import is_seeded, seed_catalog
from dsa_tutor.settings import get_active_user, set_active_user
from dsa_tutor.stats import get_stats, today_schedule

console = Console()

DIFFICULTY_COLORS = {"Easy": "green", "Medium": "yellow", "Hard": "red"}


class SessionExitRequested(Exception):
    """Raised when the learner types 'q' or 'menu' inside a session."""


EXIT_WORDS = ("q", "quit", "menu")


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_choice_prompt(prompt: str, choices: list[str]) -> str:
    while True:
        answer = session_prompt(f"{prompt} ({'/'.join(choices)})").strip().lower()
        if answer in choices:
            return answer
        console.print(f"[red]Choose one of: {', '.join(choices)}[/red]")


def configure_logging() -> None:
    level = os.environ.get("DSA_TUTOR_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def show_welcome(user_id: str):
    console.print(Panel(
        f"[bold]DSA Interview Prep[/bold]\n[dim]Spaced-repetition tutor · signed in as {user_id}[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's plan"),
        ("search", "Search problems"),
        ("attempt", "Log an attempt"),
        ("complete", "Mark a problem solved"),
        ("due", "Revisions due now"),
        ("revise", "Run a revision session"),
        ("mistake", "Log a mistake"),
        ("stats", "Progress stats"),
        ("plan", "Generate / view the 60-day plan"),
        ("import", "Import problems from a file"),
        ("user", "Switch user"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def problem_table(problems: list, title: str = "Problems") -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Difficulty")
    table.add_column("Topics")
    for p in problems:
        color = DIFFICULTY_COLORS[p.difficulty]
        table.add_row(str(p.id), p.title, f"[{color}]{p.difficulty}[/{color}]", ", ".join(p.topics))
    return table


def run_revision_session(db_path: str, user_id: str, problem_id: int) -> None:
    """Walk the learner through recall, pattern notes and code review."""
    problem = get_problem(db_path, problem_id)
    progress = get_progress(db_path, user_id, problem_id)
    session = start_session(db_path, user_id, problem_id)

    console.print(Panel(
        f"{problem.description}\n\n[dim]Topics: {', '.join(problem.topics)}[/dim]",
        title=f"Step 1/3 · Recall: {problem.title}", border_style="cyan",
    ))
    console.print("[dim]What approach did you use? What was the key insight? Complexity?[/dim]")
    session_prompt("[dim]Press Enter when you have recalled it[/dim]", default="")
    session.rate_recall(session_choice_prompt("How hard was the recall?", list(RECALL_DIFFICULTIES)))

    session.advance()
    console.print(Panel(
        progress.pattern_notes or "[dim]No pattern notes saved.[/dim]",
        title="Step 2/3 · Pattern notes", border_style="blue",
    ))
    session_prompt("[dim]Press Enter to review your code[/dim]", default="")

    session.advance()
    console.print(Panel(
        progress.user_solution or problem.solution or "[dim]No solution saved.[/dim]",
        title="Step 3/3 · Code review", border_style="green",
    ))
    session_prompt("[dim]Press Enter to finish[/dim]", default="")

    record = session.finish(db_path)
    console.print(
        f"[green]Revision {record.revision_count} saved.[/green] "
        f"Next review in {record.revision_interval} day(s) ({record.next_revision_date[:10]})."
    )


def cmd_today(db_path: str, user_id: str):
    entry = today_schedule(db_path, user_id)
    if not entry:
        console.print("[yellow]No plan entry for today. Use 'plan' to generate one.[/yellow]")
        return
    console.print(Panel(
        f"Day [bold]{entry.day}[/bold] of 60 · {entry.phase}"
        + (" · [green]Done[/green]" if entry.is_completed else ""),
        title="Today's Plan",
    ))
    problems = [get_problem(db_path, pid) for pid in entry.problem_ids]
    console.print(problem_table(problems, title="New problems"))
    if entry.revision_problem_ids:
        revisions = [get_problem(db_path, pid) for pid in entry.revision_problem_ids]
        console.print(problem_table(revisions, title="Revisions"))
    if entry.flashcard_topics:
        console.print(f"[bold]Flashcards:[/bold] {', '.join(entry.flashcard_topics)}")
    done = get_day_progress(db_path, user_id, entry.day)
    console.print(
        f"\n  Solved [bold]{done['solved']}/{done['new_total']}[/bold]  |  "
        f"Revised [bold]{done['revised']}/{done['revision_total']}[/bold]"
    )


def cmd_search(db_path: str):
    query = Prompt.ask("Title contains", default="")
    topic = Prompt.ask("Topic (blank for any)", default="")
    difficulty = Prompt.ask("Difficulty", choices=["any", *DIFFICULTIES], default="any")
    if difficulty == "any":
        difficulty = None
    problems = search_problems(db_path, query, topic or None, difficulty)
    if not problems:
        console.print("[yellow]No matching problems.[/yellow]")
        return
    console.print(problem_table(problems[:50], title=f"{len(problems)} problems"))


def cmd_attempt(db_path: str, user_id: str):
    problem_id = IntPrompt.ask("Problem ID")
    succeeded = Confirm.ask("Did you solve it?")
    minutes = IntPrompt.ask("Minutes spent", default=0)
    record = record_attempt(db_path, user_id, problem_id, succeeded, minutes)
    console.print(
        f"[green]Logged.[/green] {record.successful_attempts}/{record.attempts} successful attempts."
    )


def cmd_complete(db_path: str, user_id: str):
    problem_id = IntPrompt.ask("Problem ID")
    problem = get_problem(db_path, problem_id)
    console.print(f"[bold]{problem.title}[/bold]")
    summary = Prompt.ask("One-line pattern summary")
    console.print("[dim]Paste your solution; finish with an empty line.[/dim]")
    lines = []
    while True:
        line = Prompt.ask("", default="")
        if not line:
            break
        lines.append(line)
    notes = Prompt.ask("Notes", default="")
    minutes = IntPrompt.ask("Minutes spent", default=30)
    record = complete_problem(
        db_path, user_id, problem_id, summary, "\n".join(lines), notes, time_spent_seconds=minutes * 60,
    )
    console.print(f"[green]Completed![/green] First revision on {record.next_revision_date[:10]}.")


def cmd_due(db_path: str, user_id: str):
    due = get_due(db_path, user_id)
    if not due:
        console.print("[green]Nothing due for revision.[/green]")
    else:
        table = Table(title="Due for revision")
        table.add_column("ID", justify="right")
        table.add_column("Title", style="cyan")
        table.add_column("Due since")
        table.add_column("Revisions", justify="right")
        table.add_column("Last recall")
        for item in due:
            table.add_row(
                str(item.problem.id), item.problem.title, item.progress.next_revision_date[:10],
                str(item.progress.revision_count), item.progress.last_recall_difficulty or "-",
            )
        console.print(table)
    forecast = revision_forecast(db_path, user_id, days=7)
    console.print("  ".join(f"[dim]{f['date'][5:]}[/dim] {f['count']}" for f in forecast))


def cmd_revise(db_path: str, user_id: str):
    due = get_due(db_path, user_id)
    if due:
        problem_id = IntPrompt.ask("Problem ID", default=due[0].problem.id)
    else:
        problem_id = IntPrompt.ask("Problem ID")
    try:
        run_revision_session(db_path, user_id, problem_id)
    except SessionExitRequested:
        console.print("[dim]Revision abandoned; nothing was saved.[/dim]")


def cmd_mistake(db_path: str, user_id: str):
    problem_id = IntPrompt.ask("Problem ID")
    mistake_type = Prompt.ask("Type", choices=["logical", "syntax", "approach", "edge-case", "other"])
    description = Prompt.ask("What went wrong")
    fix = Prompt.ask("Fix (optional)", default="")
    record_mistake(db_path, user_id, problem_id, mistake_type, description, fix or None)
    console.print("[green]Mistake logged.[/green]")
    open_items = list_mistakes(db_path, user_id, unresolved_only=True)
    console.print(f"[dim]{len(open_items)} unresolved mistakes.[/dim]")


def cmd_stats(db_path: str, user_id: str):
    stats = get_stats(db_path, user_id)
    console.print(Panel(
        f"Completed [bold]{stats['completed_problems']}[/bold] of {stats['total_problems']}  |  "
        f"Accuracy [bold]{stats['accuracy']}%[/bold]  |  Streak [bold]{stats['streak']}[/bold] day(s)",
        title="Progress", border_style="blue",
    ))
    if stats["weak_topics"]:
        console.print(f"  [yellow]Weak topics: {', '.join(stats['weak_topics'])}[/yellow]")


def cmd_plan(db_path: str, user_id: str):
    days = get_schedule(db_path, user_id)
    if not days or Confirm.ask("Regenerate the 60-day plan starting today?", default=False):
        days = generate_plan(db_path, user_id)
        console.print(f"[green]Generated {len(days)} days.[/green]")
    table = Table(title="60-Day Plan")
    table.add_column("Day", justify="right")
    table.add_column("Date")
    table.add_column("Phase")
    table.add_column("New", justify="right")
    table.add_column("Revisions", justify="right")
    table.add_column("Flashcards")
    table.add_column("Status")
    today = datetime.now().date().isoformat()
    for d in days:
        status = "[green]Done[/green]" if d.is_completed else ("[cyan]Today[/cyan]" if d.date[:10] == today else "")
        table.add_row(
            str(d.day), d.date[:10], d.phase, str(len(d.problem_ids)),
            str(len(d.revision_problem_ids)), ", ".join(d.flashcard_topics), status,
        )
    console.print(table)


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(db_path, file_path)
    console.print(f"[green]Imported {result['created']} problems from {result['filename']}[/green]")
    for err in result["errors"]:
        console.print(f"  [red]row {err['row']}:[/red] {err['error']}")


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    if not is_seeded(db_path):
        console.print("[dim]Setting up for first use...[/dim]")
        created = seed_catalog(db_path)
        console.print(f"[green]Loaded {created} problems.[/green]\n")

    user_id = get_active_user(db_path)
    show_welcome(user_id)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        try:
            if choice == "today":
                cmd_today(db_path, user_id)
            elif choice == "search":
                cmd_search(db_path)
            elif choice == "attempt":
                cmd_attempt(db_path, user_id)
            elif choice == "complete":
                cmd_complete(db_path, user_id)
            elif choice == "due":
                cmd_due(db_path, user_id)
            elif choice == "revise":
                cmd_revise(db_path, user_id)
            elif choice == "mistake":
                cmd_mistake(db_path, user_id)
            elif choice == "stats":
                cmd_stats(db_path, user_id)
            elif choice == "plan":
                cmd_plan(db_path, user_id)
            elif choice == "import":
                cmd_import(db_path)
            elif choice == "user":
                user_id = Prompt.ask("User ID", default=user_id).strip()
                set_active_user(db_path, user_id)
                console.print(f"[green]Now studying as {user_id}.[/green]")
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck with your interviews![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except TutorError as e:
            console.print(f"[red]Error: {e}[/red]")
        except Exception as e:
            console.print(f"[red]Unexpected error: {e}[/red]")


if __name__ == "__main__":
    main()
