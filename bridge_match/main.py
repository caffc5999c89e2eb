from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich import print
from rich.logging import RichHandler
from rich.table import Table

from .config import Settings
from .ingest import matches_to_frame, parse_interests, profiles_to_frame
from .insights import enhance_match, insights_as_json
from .matcher import generate_all_matches, generate_matches, respond_to_match
from .ranker import rank
from .scorer import score_profiles
from .search import search_profiles
from .store import CsvMatchRepository, InMemoryProfileStore, MatchNotFoundError, ProfileNotFoundError
from .synthetic import generate_synthetic_profiles, generate_timestamped_filename


app = typer.Typer(help="Bridge mentor/seeker matching CLI")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    """Load .env and configure logging for every command."""
    load_dotenv()
    level = "DEBUG" if verbose else Settings.from_env().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_store(csv_path: Path, strict: bool = False) -> InMemoryProfileStore:
    return InMemoryProfileStore.from_csv(csv_path, strict=strict)


def _fail(message: str) -> None:
    print(f"[red]{message}[/red]")
    raise typer.Exit(code=1)


@app.command()
def score(
    csv_path: Path = typer.Argument(..., help="Profiles CSV"),
    a_id: str = typer.Argument(..., help="uid of the first profile"),
    b_id: str = typer.Argument(..., help="uid of the second profile"),
):
    """Show the compatibility breakdown for one pair."""
    store = _load_store(csv_path)
    try:
        result = score_profiles(store.get(a_id), store.get(b_id))
    except ProfileNotFoundError as e:
        _fail(f"Unknown profile: {e}")
    table = Table("component", "score")
    table.add_row("interests", f"{result.interest_score:.1f}")
    table.add_row("personality", f"{result.personality_score:.1f}")
    table.add_row("motivation", f"{result.motivation_score:.1f}")
    table.add_row("location", f"{result.location_score:.1f}")
    table.add_row("[bold]compatibility[/bold]", f"[bold]{result.compatibility_score:.1f}[/bold]")
    print(table)
    print(f"Shared interests: {', '.join(result.breakdown.common_interests) or 'none'}")
    print(f"Alignment: {result.breakdown.motivation_alignment}")


@app.command()
def recommend(
    csv_path: Path = typer.Argument(..., help="Profiles CSV"),
    who: str = typer.Option(..., help="uid to recommend for"),
    top_k: int = typer.Option(10, help="Number of candidates to show"),
    threshold: float = typer.Option(5.0, help="Minimum compatibility score"),
    out_path: Optional[Path] = typer.Option(None, help="Write recommendations to this CSV"),
):
    """Rank every other profile for one user without storing anything."""
    store = _load_store(csv_path)
    try:
        subject = store.get(who)
    except ProfileNotFoundError as e:
        _fail(f"Unknown profile: {e}")
    results = rank(subject, store.all(), threshold=threshold, top_n=top_k)
    table = Table("uid", "name", "role", "location", "score", "shared interests")
    for r in results:
        cand = store.get(r.matched_user_id)
        table.add_row(
            cand.uid,
            cand.name,
            cand.role,
            cand.location or "",
            f"{r.compatibility_score:.1f}",
            ", ".join(r.breakdown.common_interests),
        )
    print(table)
    if out_path:
        matches_to_frame(results).to_csv(out_path, index=False)
        print(f"[green]Saved recommendations to[/green] {out_path}")


@app.command()
def generate(
    csv_path: Path = typer.Argument(..., help="Profiles CSV"),
    matches_path: Path = typer.Option(Path("matches.csv"), help="Match store CSV (created if missing)"),
    user: Optional[str] = typer.Option(None, help="Only generate for this uid; default is everyone"),
    threshold: Optional[float] = typer.Option(None, help="Minimum score to store a match"),
    top_n: Optional[int] = typer.Option(None, help="Matches shown per user"),
):
    """Generate and store pending matches."""
    settings = Settings.from_env()
    threshold = settings.match_threshold if threshold is None else threshold
    top_n = settings.top_n if top_n is None else top_n

    store = _load_store(csv_path)
    repo = CsvMatchRepository(matches_path)
    before = len(repo)

    if user is not None:
        try:
            records = generate_matches(user, store, repo, threshold=threshold, top_n=top_n)
        except ProfileNotFoundError as e:
            _fail(f"Unknown profile: {e}")
        table = Table("match id", "with", "score", "status")
        for rec in records:
            table.add_row(rec.id, rec.other_user(user), f"{rec.compatibility_score:.1f}", rec.status)
        print(table)
    else:
        def progress(done: int, total: int, uid: str) -> None:
            if done % 10 == 0 or done == total:
                print(f"   - [{done}/{total}] last: {uid}")

        generate_all_matches(store, repo, threshold=threshold, top_n=top_n, progress_fn=progress)

    repo.flush()
    print(f"[bold]Stored {len(repo) - before} new matches[/bold] -> {matches_path}")


@app.command()
def respond(
    matches_path: Path = typer.Argument(..., help="Match store CSV"),
    match_id: str = typer.Argument(..., help="Match id"),
    status: str = typer.Argument(..., help="'accepted' or 'rejected'"),
):
    """Accept or reject a pending match."""
    repo = CsvMatchRepository(matches_path)
    try:
        record = respond_to_match(match_id, status, repo)  # type: ignore[arg-type]
    except MatchNotFoundError:
        _fail(f"Unknown match: {match_id}")
    except ValueError as e:
        _fail(str(e))
    repo.flush()
    print(f"[green]Match {record.id} is now {record.status}[/green]")


@app.command()
def enhance(
    csv_path: Path = typer.Argument(..., help="Profiles CSV"),
    matches_path: Path = typer.Argument(..., help="Match store CSV"),
    match_id: str = typer.Argument(..., help="Match id"),
    openai_model: Optional[str] = typer.Option(None, help="OpenAI model for the analysis"),
):
    """Attach an AI compatibility analysis to a stored match."""
    store = _load_store(csv_path)
    repo = CsvMatchRepository(matches_path)
    try:
        record = enhance_match(match_id, store, repo, model=openai_model)
    except (MatchNotFoundError, ProfileNotFoundError) as e:
        _fail(f"Not found: {e}")
    except RuntimeError as e:
        _fail(str(e))
    repo.flush()
    print(insights_as_json(record.ai_analysis))


@app.command()
def search(
    csv_path: Path = typer.Argument(..., help="Profiles CSV"),
    query: str = typer.Argument("", help="Free-text query; optional when a filter is given"),
    role: Optional[str] = typer.Option(None, help="Only 'mentor' or 'seeker' profiles"),
    location: Optional[str] = typer.Option(None, help="Exact location filter"),
    interests: Optional[str] = typer.Option(None, help="Comma-separated interests; any one must match"),
    limit: int = typer.Option(20, help="Maximum number of results"),
):
    """Search profiles by name, bio, interests and location."""
    store = _load_store(csv_path)
    filters = {k: v for k, v in {"role": role, "location": location}.items() if v is not None}
    if interests:
        filters["interests"] = parse_interests(interests)
    try:
        hits = search_profiles(store.all(), query, filters=filters, limit=limit)
    except ValueError as e:
        _fail(str(e))
    table = Table("uid", "name", "role", "location", "relevance")
    for profile, sim in hits:
        table.add_row(profile.uid, profile.name, profile.role, profile.location or "", f"{sim:.3f}")
    print(table)


@app.command()
def synth(
    n: int = typer.Option(50, help="Number of profiles"),
    seed: Optional[int] = typer.Option(None, help="RNG seed for reproducible output"),
    out_path: Optional[Path] = typer.Option(None, help="Output CSV; timestamped name by default"),
):
    """Write synthetic profiles to CSV."""
    profiles = generate_synthetic_profiles(n, seed=seed)
    out = out_path or Path(generate_timestamped_filename("synthetic_profiles", "csv"))
    profiles_to_frame(profiles).to_csv(out, index=False)
    print(f"[green]Wrote {len(profiles)} profiles to[/green] {out}")


if __name__ == "__main__":
    app()
