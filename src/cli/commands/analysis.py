"""Skill and contribution analysis commands."""

import click
from rich.table import Table

from analysis import ContributionAggregator, SkillAnalyzer
from cli.utils import console, get_config, run_with_client


@click.command()
@click.argument("login")
def skills(login: str):
    """Infer languages, frameworks and interests from LOGIN's public repos."""
    config = get_config()
    with console.status(f"Analyzing {login}'s repositories..."):
        result = run_with_client(config, lambda client: SkillAnalyzer(client).analyze(login))

    summary = result.summary
    console.print(
        f"\n[bold]{login}[/] - [cyan]{result.experience_level}[/] "
        f"(confidence {result.confidence}%)"
    )
    console.print(
        f"[dim]{summary.total_repositories} repos, ~{summary.estimated_commits} commits, "
        f"{summary.recent_activity}[/]\n"
    )

    if not result.languages and not result.frameworks:
        console.print("[yellow]No public repositories to analyze.[/]")
        return

    table = Table(title="Skills")
    table.add_column("Kind", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Level")
    table.add_column("Confidence", justify="right")
    for lang in result.languages:
        table.add_row("language", lang.name, str(lang.level), f"{lang.confidence:.0f}%")
    for fw in result.frameworks:
        table.add_row("framework", fw.name, str(fw.level), f"{fw.confidence:.0f}%")
    console.print(table)

    if result.interests:
        console.print(f"\n[bold]Interests:[/] {', '.join(result.interests)}")


@click.command()
@click.argument("login")
def contributions(login: str):
    """Summarize LOGIN's pull requests, issues and commits."""
    config = get_config()
    with console.status(f"Collecting contributions for {login}..."):
        history = run_with_client(
            config, lambda client: ContributionAggregator(client).analyze(login)
        )

    summary, stats = history.summary, history.stats
    console.print(
        f"\n[bold]{login}[/]: {summary.total_contributions} contributions "
        f"({summary.total_pull_requests} PRs, {summary.merged_pull_requests} merged; "
        f"{summary.total_issues} issues; {summary.total_commits} commits)"
    )
    console.print(
        f"[dim]{summary.recent_activity}, streak {stats.contribution_streak} days, "
        f"+{stats.total_additions}/-{stats.total_deletions}[/]\n"
    )

    table = Table(title="Monthly activity")
    table.add_column("Month")
    table.add_column("PRs", justify="right")
    table.add_column("Issues", justify="right")
    table.add_column("Commits", justify="right")
    table.add_column("Total", justify="right", style="bold")
    for month in stats.monthly_activity:
        table.add_row(
            month.month,
            str(month.pull_requests),
            str(month.issues),
            str(month.commits),
            str(month.total),
        )
    console.print(table)

    if stats.top_repositories:
        console.print("\n[bold]Top repositories:[/]")
        for repo in stats.top_repositories[:5]:
            console.print(f"  {repo.repository} [dim]({repo.count})[/]")
