"""Interactive CLI application."""
import sys

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from hanzi_tutor.catalog import BOOKMARKS_DECK_ID
from hanzi_tutor.config import settings
from hanzi_tutor.db import PersistenceError
from hanzi_tutor.engine import ProgressEngine
from hanzi_tutor.exam import DeckStatus, is_passing_score
from hanzi_tutor.models import PracticeSession, QuestionType

console = Console()

EXIT_WORDS = ("q", "quit", "menu")

STATUS_LABELS = {
    DeckStatus.UNSEEN: "[dim]New[/dim]",
    DeckStatus.IN_PROGRESS: "[cyan]Learning[/cyan]",
    DeckStatus.ALL_WORDS_MASTERED: "[yellow]Exam ready[/yellow]",
    DeckStatus.EXAM_PASSED: "[green]Mastered[/green]",
}


class SessionExitRequested(Exception):
    """The user left a practice session before its last item."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def choice_prompt(prompt: str, options: list[str]) -> str:
    """Ask for a numbered option and return the chosen option text."""
    for i, option in enumerate(options, 1):
        console.print(f"  [cyan]{i})[/cyan] {option}")
    answer = session_prompt(prompt, choices=[str(i) for i in range(1, len(options) + 1)])
    return options[int(answer) - 1]


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("decks", "Decks and progress"),
        ("practice", "Practice a deck"),
        ("exam", "Take a deck exam"),
        ("badges", "Topic badges"),
        ("bookmark", "Bookmark a word"),
        ("stories", "Read a story"),
        ("reset", "Reset all progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<10}[/cyan] {desc}")


def pick_deck(engine: ProgressEngine) -> str:
    decks = engine.catalog.decks()
    for i, d in enumerate(decks, 1):
        console.print(f"  [cyan]{i}[/cyan]) {d.name} [dim]({d.category})[/dim]")
    ids = [d.id for d in decks]
    if engine.mastery.bookmarked_ids():
        console.print(f"  [cyan]{len(decks) + 1}[/cyan]) My Bookmarks")
        ids.append(BOOKMARKS_DECK_ID)
    choice = Prompt.ask("Select deck", choices=[str(i) for i in range(1, len(ids) + 1)])
    return ids[int(choice) - 1]


def ask_item(engine: ProgressEngine, session: PracticeSession, number: int) -> bool:
    """Present one session item and return whether it was answered correctly."""
    item = session.current
    word = session.word_for(item)
    words = session.words
    title = f"Question {number}/{len(session.items)}"

    if item.question_type is QuestionType.FLASHCARD:
        console.print(Panel(f"[bold]{word.hanzi}[/bold]", title=title, border_style="cyan"))
        session_prompt("[dim]Press Enter to reveal answer[/dim]", default="", show_default=False)
        console.print(Panel(f"{word.pinyin}\n{', '.join(word.english)}", border_style="green"))
        return session_prompt("Did you know it?", choices=["y", "n"]) == "y"

    if item.question_type is QuestionType.PINYIN:
        console.print(Panel(f"How is [bold]{word.hanzi}[/bold] pronounced?", title=title, border_style="cyan"))
        options, answer = engine.distractors.pinyin_options(word, words)
    elif item.question_type is QuestionType.CONSTRUCTION:
        console.print(Panel(f"Build the word for [bold]{', '.join(word.english)}[/bold]", title=title,
                            border_style="cyan"))
        options = engine.distractors.construction_options(word, words)
        console.print("  " + "  ".join(options))
        typed = session_prompt("Type the characters in order")
        correct = typed.strip() == word.hanzi
        if not correct:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{word.hanzi}[/green]")
        return correct
    else:
        console.print(Panel(f"What does [bold]{word.hanzi}[/bold] mean?", title=title, border_style="cyan"))
        options, answer = engine.distractors.meaning_options(word, words)

    chosen = choice_prompt("Your answer", options)
    if chosen == answer:
        return True
    console.print(f"[red]Incorrect.[/red] Answer: [green]{answer}[/green]")
    return False


def run_practice_session(engine: ProgressEngine, session: PracticeSession) -> None:
    if session.is_empty:
        console.print("[yellow]Nothing to practice in this deck yet.[/yellow]")
        return
    console.print(f"\n[bold]Practice Session[/bold] - {len(session.items)} questions\n")
    while not session.is_finished:
        item = session.current
        correct = ask_item(engine, session, session.answered + 1)
        result = engine.submit_answer(session, item, correct)
        if correct:
            console.print(f"[green]Correct![/green] [dim]mastery {result.mastery:.0%}[/dim]\n")
        else:
            console.print(f"[dim]mastery {result.mastery:.0%}[/dim]\n")
    engine.complete_session(session)
    console.print("[bold]Session complete![/bold]")
    if session.mastered_this_session:
        words = {w.id: w for w in session.words}
        learned = ", ".join(words[i].hanzi for i in sorted(session.mastered_this_session))
        console.print(f"[green]Mastered this session: {learned}[/green]")


def cmd_decks(engine: ProgressEngine):
    table = Table(title="Decks")
    table.add_column("Deck", style="cyan")
    table.add_column("Topic")
    table.add_column("Unlocked", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Status")
    for d in engine.catalog.decks():
        total = len(engine.catalog.load_deck_words(d.id))
        unlocked = engine.gate.unlocked_count(d.id, total)
        table.add_row(
            d.name, d.category, f"{unlocked}/{total}",
            f"{engine.deck_progress(d.id):.0%}",
            STATUS_LABELS[engine.decks.deck_status(d.id)],
        )
    console.print(table)
    console.print(f"\n  Sessions completed: [bold]{engine.total_sessions()}[/bold]")


def cmd_practice(engine: ProgressEngine):
    deck_id = pick_deck(engine)
    session = engine.build_session(deck_id)
    try:
        run_practice_session(engine, session)
    except SessionExitRequested:
        console.print("[dim]Session abandoned. Answers so far are kept.[/dim]")


def cmd_exam(engine: ProgressEngine):
    deck_id = pick_deck(engine)
    if engine.decks.is_deck_mastered(deck_id):
        console.print("[green]This deck is already mastered.[/green]")
        return
    if not engine.attempt_exam(deck_id):
        console.print("[yellow]Master every word in this deck to unlock its exam.[/yellow]")
        return
    questions = engine.build_exam(deck_id)
    correct = 0
    try:
        for i, q in enumerate(questions, 1):
            console.print(f"\n[bold]Q{i}.[/bold] What does [bold]{q.word.hanzi}[/bold] mean?")
            if choice_prompt("Your answer", q.options) == q.answer:
                correct += 1
    except SessionExitRequested:
        console.print("[dim]Exam abandoned.[/dim]")
        return
    console.print(f"\n[bold]Score: {correct}/{len(questions)}[/bold]")
    if not is_passing_score(correct, len(questions)):
        console.print("[yellow]Not quite. Review the deck and try again.[/yellow]")
        return
    badge = engine.pass_exam(deck_id)
    console.print("[green]Deck mastered![/green]")
    if badge is not None:
        console.print(Panel(f"All decks in [bold]{badge.category}[/bold] mastered!", title="Badge earned",
                            border_style="yellow"))


def cmd_badges(engine: ProgressEngine):
    table = Table(title="Topic Badges")
    table.add_column("Topic")
    table.add_column("Decks", justify="right")
    table.add_column("Badge")
    for category in engine.catalog.categories():
        decks = engine.catalog.decks_in_category(category)
        done = sum(1 for d in decks if engine.decks.is_deck_mastered(d.id))
        badge = engine.badges.badge(category)
        earned = f"[green]Earned {badge.awarded_at:%Y-%m-%d}[/green]" if badge else ""
        table.add_row(category, f"{done}/{len(decks)}", earned)
    console.print(table)


def cmd_bookmark(engine: ProgressEngine):
    hanzi = Prompt.ask("Word (hanzi)").strip()
    word = next((w for w in engine.catalog.load_dictionary().values() if w.hanzi == hanzi), None)
    if word is None:
        console.print(f"[red]Unknown word: {hanzi}[/red]")
        return
    state = engine.toggle_bookmark(word.id)
    console.print(f"[green]{'Bookmarked' if state else 'Removed bookmark'}: {word.hanzi}[/green]")


def cmd_stories(engine: ProgressEngine):
    stories = engine.catalog.load_stories()
    if not stories:
        console.print("[yellow]No stories available.[/yellow]")
        return
    table = Table(title=f"Stories ({engine.stories.total_completed()} read)")
    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Topic")
    table.add_column("Level", justify="right")
    table.add_column("Read")
    for i, meta in enumerate(stories, 1):
        done = "[green]yes[/green]" if engine.stories.is_completed(meta.story_id) else ""
        table.add_row(str(i), meta.title, meta.topic, str(meta.difficulty), done)
    console.print(table)

    answer = Prompt.ask("Story number (blank to go back)", default="").strip()
    if not answer.isdigit() or not 1 <= int(answer) <= len(stories):
        return
    story = engine.catalog.load_story(stories[int(answer) - 1].story_id)
    if story is None:
        console.print("[red]Could not load that story.[/red]")
        return
    console.print(Panel(story.text, title=story.title, subtitle=story.subtitle))
    for word in engine.catalog.story_words(story.story_id):
        console.print(f"  [cyan]{word.hanzi}[/cyan] {word.pinyin}  [dim]{', '.join(word.english)}[/dim]")
    if Prompt.ask("Toggle read?", choices=["y", "n"], default="n") == "y":
        state = engine.toggle_story_completion(story.story_id)
        console.print(f"[green]{'Marked as read' if state else 'Marked as unread'}[/green]")


def cmd_reset(engine: ProgressEngine):
    if Prompt.ask("Erase all progress?", choices=["y", "n"], default="n") == "y":
        engine.reset_all()
        console.print("[green]Progress reset.[/green]")


def main():
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level,
               format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}")
    engine = ProgressEngine(config=settings)
    console.print(Panel("[bold]Hanzi Tutor[/bold]\n[dim]Vocabulary practice[/dim]",
                        title="Welcome", border_style="blue"))

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="practice").strip().lower()
        try:
            if choice == "decks":
                cmd_decks(engine)
            elif choice == "practice":
                cmd_practice(engine)
            elif choice == "exam":
                cmd_exam(engine)
            elif choice == "badges":
                cmd_badges(engine)
            elif choice == "bookmark":
                cmd_bookmark(engine)
            elif choice == "stories":
                cmd_stories(engine)
            elif choice == "reset":
                cmd_reset(engine)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]加油! See you next time.[/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except PersistenceError as e:
            console.print(f"[red]Could not save progress: {e}[/red]")


if __name__ == "__main__":
    main()
