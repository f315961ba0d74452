"""CLI entry point for studydash."""

import asyncio

import click

from studydash.config.settings import LearningStyle, Settings


@click.group()
@click.option("--api-url", default=None, help="Override the remote API base URL")
@click.pass_context
def main(ctx: click.Context, api_url: str) -> None:
    """studydash: adaptive quizzes against the learning dashboard API."""
    from studydash.config.log import configure_logging

    settings = Settings.load()
    if api_url:
        settings.api.pin_base_url(api_url)
    configure_logging(settings.get_log_level())
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@main.command()
@click.option("--student", "student_id", required=True, help="Learner id")
@click.option("--subject", required=True)
@click.option("--topic", required=True, help="Starting topic")
@click.option(
    "--style",
    type=click.Choice([s.value for s in LearningStyle]),
    default=None,
    help="Learning style (defaults to the configured one)",
)
@click.pass_context
def quiz(ctx: click.Context, student_id: str, subject: str, topic: str, style: str) -> None:
    """Run an interactive quiz session.

    Type an answer to submit it, '?' for a hint, 'n' for the next question
    and 'q' to finish and save the attempt.
    """
    settings: Settings = ctx.obj["settings"]
    asyncio.run(_run_quiz(settings, student_id, subject, topic, style))


async def _run_quiz(settings: Settings, student_id: str, subject: str, topic: str, style) -> None:
    from studydash.clients.llm import LLMClient
    from studydash.clients.rl import RLClient
    from studydash.clients.transport import ApiTransport
    from studydash.engine.quiz_session import QuizSession, SessionState
    from studydash.state.attempts import AttemptStore

    async with ApiTransport(settings.api.resolved()) as transport:
        session = QuizSession(
            student_id=student_id,
            subject=subject,
            topic=topic,
            llm=LLMClient(transport),
            rl=RLClient(transport),
            learning_style=style or settings.default_learning_style.value,
            requery_on_advance=settings.requery_on_advance,
        )
        await session.start()

        while True:
            if session.error:
                click.secho(session.error, fg="red")
            if session.state == SessionState.READY:
                click.echo(f"\n[{session.cycle.topic}] {session.cycle.question}")

            entry = (await asyncio.to_thread(click.prompt, ">", default="", show_default=False)).strip()
            if entry == "q":
                break
            if entry == "?":
                if await session.get_hint():
                    click.secho(f"Study tip: {session.cycle.hint}", fg="blue")
            elif entry == "n":
                if session.state == SessionState.ERROR:
                    await session.load_question()
                else:
                    await session.next_question()
            elif await session.submit(entry):
                mark = "correct" if session.cycle.is_correct else "incorrect"
                click.secho(f"{mark}: {session.cycle.feedback}", fg="green" if session.cycle.is_correct else "yellow")
                if session.cycle.hint:
                    click.echo(f"Study tip: {session.cycle.hint}")

        await session.drain()
        attempt = session.complete()
        if attempt is not None:
            AttemptStore(db_path=settings.data_dir / "attempts.db").save(attempt)
            click.echo(
                f"Saved attempt {attempt.id}: {attempt.correct_count}/{len(attempt.responses)} correct"
            )


@main.command()
@click.argument("student_id")
@click.pass_context
def attempts(ctx: click.Context, student_id: str) -> None:
    """List saved quiz attempts for a learner."""
    from studydash.state.attempts import AttemptStore

    settings: Settings = ctx.obj["settings"]
    store = AttemptStore(db_path=settings.data_dir / "attempts.db")
    saved = store.list_for_student(student_id)
    if not saved:
        click.echo(f"No attempts for {student_id}")
        return
    for a in saved:
        click.echo(
            f"  {a.completed_at}  {a.subject}/{a.topic}: "
            f"{a.correct_count}/{len(a.responses)} ({a.score:.0%})"
        )


@main.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Run the JSON-lines server on stdin/stdout."""
    from studydash.server.__main__ import main as server_main

    asyncio.run(server_main(ctx.obj["settings"]))
