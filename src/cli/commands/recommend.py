"""Recommendation CLI commands."""

import sys
from typing import Optional

import click
from rich.table import Table

from analysis import SkillAnalyzer
from cli.utils import console, get_config, run_with_client
from recommend import RecommendationEngine, RecommendationError, ScoredRecommendation, SkillProfile
from shared_types import ExperienceLevel

LEVELS = [level.value for level in ExperienceLevel]


def _display_recommendations(recs: list[ScoredRecommendation]):
    """Display recommendations in formatted output."""
    if not recs:
        console.print("[yellow]No matching repositories found.[/]")
        return

    for rec in recs:
        repo = rec.repository
        console.print(f"\n[cyan bold]{repo.full_name}[/] [dim]{repo.html_url}[/]")
        console.print(f"[green]Match: {rec.match_score}[/]  {repo.stargazers_count:,} stars")
        if repo.description:
            console.print(repo.description)
        for reason in rec.reasons:
            console.print(f"  [dim]- {reason}[/]")
        for issue in rec.suggested_issues:
            console.print(f"  [yellow]#{issue.number}[/] {issue.title}")


@click.command()
@click.option("-l", "--language", "languages", multiple=True, help="Language you know (repeatable)")
@click.option("-f", "--framework", "frameworks", multiple=True, help="Framework you use (repeatable)")
@click.option("-i", "--interest", "interests", multiple=True, help="Topic of interest (repeatable)")
@click.option("--level", type=click.Choice(LEVELS), default=None, help="Experience level")
@click.option("--from-analysis", "analyze_login", default=None, metavar="LOGIN",
              help="Start from the skills inferred from LOGIN's public repos")
@click.option("--personalized", "username", default=None, metavar="LOGIN",
              help="Widen and filter results using LOGIN's stars, follows and activity")
def recommend(
    languages: tuple,
    frameworks: tuple,
    interests: tuple,
    level: Optional[str],
    analyze_login: Optional[str],
    username: Optional[str],
):
    """Recommend repositories to contribute to."""
    if not (languages or frameworks or interests or analyze_login):
        console.print("[red]Give at least one --language, --framework, --interest or --from-analysis.[/]")
        sys.exit(2)

    config = get_config()

    async def build_skills(client) -> SkillProfile:
        if not analyze_login:
            return SkillProfile(
                languages=list(languages),
                frameworks=list(frameworks),
                interests=list(interests),
                experience_level=level or config.recommendations.experience_level,
            )
        inferred = (await SkillAnalyzer(client).analyze(analyze_login)).to_skill_profile()
        return SkillProfile(
            languages=[*languages, *inferred.languages],
            frameworks=[*frameworks, *inferred.frameworks],
            interests=[*interests, *inferred.interests],
            experience_level=level or inferred.experience_level,
        )

    async def work(client):
        skills = await build_skills(client)
        if skills.is_empty():
            return []
        engine = RecommendationEngine(client)
        if username:
            return await engine.get_personalized_recommendations(skills, username)
        return await engine.get_recommendations(skills)

    try:
        with console.status("Searching repositories..."):
            recs = run_with_client(config, work)
    except RecommendationError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    _display_recommendations(recs)


@click.command()
@click.argument("language")
@click.option("-n", "--limit", default=None, type=int, help="Max repositories to show")
def trending(language: str, limit: Optional[int]):
    """Well-starred repositories for LANGUAGE."""
    config = get_config()
    limit = limit or config.recommendations.trending_limit

    try:
        with console.status(f"Finding trending {language} repositories..."):
            repos = run_with_client(
                config, lambda client: RecommendationEngine(client).trending(language, limit)
            )
    except RecommendationError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    if not repos:
        console.print("[yellow]No repositories found.[/]")
        return

    table = Table(title=f"Trending {language}")
    table.add_column("Repository", style="cyan")
    table.add_column("Stars", justify="right")
    table.add_column("Open issues", justify="right")
    table.add_column("Description")
    for repo in repos:
        table.add_row(
            repo.full_name,
            f"{repo.stargazers_count:,}",
            str(repo.open_issues_count),
            (repo.description or "")[:60],
        )
    console.print(table)
