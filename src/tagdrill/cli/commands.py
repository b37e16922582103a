"""CLI commands for tagdrill.

Commands:
- quiz: Interactive tag recall quiz (normal or exam mode)
- stats: Proficiency overview
- wrongbook: Items answered wrong, most troublesome first
- datasets: Records loaded per category
- reset: Clear stored proficiency
"""

from pathlib import Path

import typer
from rich.console import Console

from tagdrill.config.app_config import AppConfig, load_app_config
from tagdrill.core.categories import MIXED, Category, get_schema
from tagdrill.core.proficiency import JsonFileStore, ProficiencyTracker
from tagdrill.core.record_merger import Dataset, load_dataset
from tagdrill.core.reports import proficiency_overview, wrongbook as build_wrongbook
from tagdrill.core.session import QuizSession, SubmitResult
from tagdrill.utils.validators import (
    AmbiguousCategoryError,
    CategoryNotFoundError,
    available_categories,
    parse_limit,
    resolve_category,
)

app = typer.Typer(
    name="tagdrill",
    help="Self-quizzing over plant tag reference tables.",
    no_args_is_help=True,
)

console = Console()

COLOR_STYLES = {
    "green": "green",
    "yellow": "yellow",
    "orange": "dark_orange",
    "red": "red",
    "blue": "blue",
}


def _load_config() -> AppConfig:
    # TAGDRILL_DATA_DIR may differ between invocations
    return load_app_config(force_reload=True)


def _load_dataset(config: AppConfig) -> Dataset:
    return load_dataset(config.data_dir, config.tables)


def _make_tracker(config: AppConfig) -> ProficiencyTracker:
    store = JsonFileStore(config.state_dir, config.proficiency.namespace)
    return ProficiencyTracker(store)


def _resolve_category_or_exit(text: str) -> Category | str:
    """Resolve category input, or exit with the accepted names."""
    try:
        return resolve_category(text)
    except CategoryNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        console.print("\n可选类别：")
        for name in available_categories():
            console.print(f"  - {name}")
        raise typer.Exit(code=1)
    except AmbiguousCategoryError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _dots(level: int) -> str:
    return "●" * level + "○" * (5 - level)


def _field_label(category: Category, field_name: str) -> str:
    return get_schema(category).label(field_name)


def _show_answer(result: SubmitResult) -> None:
    """Reveal the reference values and the verdict."""
    item = result.item
    lines = [f"位号：{item.tag}"]
    for field_name, value in (result.truth or {}).items():
        lines.append(f"{_field_label(item.category, field_name)}：{value}")

    color = "green" if result.is_correct else "red"
    verdict = "✓ 正确" if result.is_correct else "✗ 错误"
    console.print(f"[{color}]{verdict}[/{color}]")
    for line in lines:
        console.print(f"  [dim]{line}[/dim]")

    if result.grade and result.grade.failed_fields:
        failed = ", ".join(_field_label(item.category, f) for f in result.grade.failed_fields)
        console.print(f"  [yellow]未通过：{failed}[/yellow]")


def _ask_answers(category: Category, fields: list[str]) -> dict[str, str]:
    """Prompt field by field; a `1`/`2` name answer ends the prompt early."""
    answers: dict[str, str] = {}
    for field_name in fields:
        raw = typer.prompt(
            _field_label(category, field_name), default="", show_default=False
        )
        answers[field_name] = raw
        if field_name == "name" and raw.strip() in ("1", "2"):
            break
    return answers


# =============================================================================
# COMMANDS
# =============================================================================


@app.command()
def quiz(
    category: str | None = typer.Option(
        None, "--category", "-c", help="设备 / 阀门 / 性能参数 / 工艺指标 / 混合 (or English alias)"
    ),
    limit: str = typer.Option("", "--limit", "-n", help="Number of items (blank = all)"),
    exam: bool = typer.Option(False, "--exam", "-e", help="Exam mode: sample 33% of each category"),
    pause: float | None = typer.Option(
        None, "--pause", help="Seconds to show the answer before the next item"
    ),
) -> None:
    """Take an interactive tag quiz.

    Answer `1` in the name field to mark an item as known, `2` as unknown.

    Example:
        tagdrill quiz -c 阀门 -n 20 --exam
    """
    config = _load_config()
    selected = _resolve_category_or_exit(category or config.quiz.default_category)

    dataset = _load_dataset(config)
    tracker = _make_tracker(config)
    session = QuizSession(
        dataset,
        tracker,
        pause_seconds=config.quiz.pause_seconds if pause is None else pause,
        exam_ratio=config.quiz.exam_ratio,
    )

    started = session.start(selected, item_limit=parse_limit(limit), exam_mode=exam)
    if not started.success:
        console.print(f"[yellow]⚠ {started.message}[/yellow]")
        console.print(f"  [dim]数据目录：[/dim] {config.data_dir}")
        raise typer.Exit(code=1)

    label = selected.value if isinstance(selected, Category) else MIXED
    mode = "考试模式" if exam else "练习模式"
    console.print(f"\n[bold]{label} · {mode}[/bold]  [dim]{started.message}[/dim]")
    console.print("[dim]快捷键：名称输入 1（知道/判对），2（不知道/判错）[/dim]")

    while session.is_running:
        item = session.current_item()
        rec = tracker.get(item.category.value, item.tag)
        console.print(
            f"\n[blue]{session.cursor + 1}/{session.total}[/blue]  "
            f"[cyan]{item.category.value}[/cyan]  位号：[bold]{item.tag}[/bold]  "
            f"[dim]{_dots(rec.level)}[/dim]"
        )

        fields = session.current_fields()
        if not fields:
            console.print("[yellow]⚠ 数据缺失，跳过[/yellow]")
            session.skip()
            continue

        answers = _ask_answers(item.category, fields)
        result = session.submit(answers)
        if not result.success:
            console.print(f"[yellow]⚠ {result.message}[/yellow]")
            session.skip()
            continue

        _show_answer(result)
        session.wait()

    console.print(f"\n[green]✓ 练习完成[/green]  正确：{session.correct_count}/{session.total}")


@app.command()
def stats() -> None:
    """Show the proficiency overview."""
    from rich.table import Table

    config = _load_config()
    tracker = _make_tracker(config)
    overview = proficiency_overview(tracker.entries())

    if overview.total == 0:
        console.print("[yellow]暂无数据。[/yellow]")
        return

    console.print(
        f"\n[bold]熟练度[/bold]  条目：{overview.total}  正确：{overview.sum_correct}  "
        f"错误：{overview.sum_wrong}  平均熟练度：{overview.avg_level:.2f}"
    )
    for name, rate in overview.category_accuracy.items():
        console.print(f"  [dim]{name} 平均正确率：[/dim] {rate}%")
    dist = "  ".join(f"Lv{i}:{n}" for i, n in enumerate(overview.distribution))
    console.print(f"  [dim]分布：[/dim] {dist}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("类别|位号")
    table.add_column("正确", justify="right")
    table.add_column("错误", justify="right")
    table.add_column("熟练度")
    for row in overview.rows:
        style = COLOR_STYLES[row.color]
        table.add_row(
            f"[{style}]●[/{style}] {row.key}",
            str(row.correct),
            str(row.wrong),
            _dots(row.level),
        )
    console.print(table)


@app.command()
def wrongbook() -> None:
    """List items answered wrong at least once."""
    from rich.table import Table

    config = _load_config()
    tracker = _make_tracker(config)
    entries = build_wrongbook(tracker.entries(), _load_dataset(config))

    if not entries:
        console.print("[yellow]暂无记录。请先在练习中答题。[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("")
    table.add_column("位号")
    table.add_column("名称")
    table.add_column("错", justify="right")
    table.add_column("类别")
    for entry in entries:
        style = COLOR_STYLES[entry.severity]
        table.add_row(
            f"[{style}]●[/{style}]",
            entry.tag,
            entry.name,
            str(entry.wrong),
            entry.category,
        )
    console.print(f"\n[bold]错题本[/bold] ({len(entries)})")
    console.print(table)


@app.command()
def datasets() -> None:
    """Show how many records each reference table produced."""
    config = _load_config()
    dataset = _load_dataset(config)

    console.print(f"\n[bold]数据目录：[/bold] {config.data_dir}")
    for category, count in dataset.counts().items():
        stats_ = dataset.stats.get(category)
        dropped = f"  [dim](丢弃 {stats_.rows_dropped} 行)[/dim]" if stats_ and stats_.rows_dropped else ""
        path: Path = config.table_path(category)
        status = "" if path.exists() else "  [yellow]缺失[/yellow]"
        console.print(f"  {category.value}: {count}{dropped}{status}")

    if dataset.is_empty:
        console.print("[yellow]⚠ 请先导入 CSV 数据[/yellow]")
        raise typer.Exit(code=1)


@app.command()
def reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Clear all stored proficiency records."""
    config = _load_config()
    tracker = _make_tracker(config)

    if not force:
        confirmed = typer.confirm("确定清除全部熟练度记录？", default=False)
        if not confirmed:
            console.print("[dim]已取消[/dim]")
            raise typer.Exit(code=0)

    removed = tracker.reset()
    console.print(f"[green]✓ 已清除 {removed} 条记录[/green]")


if __name__ == "__main__":
    app()
