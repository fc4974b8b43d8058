"""CLI for the Instance Matching Engine.

Provides command-line interface for matching compute requirements
against an instance catalog with live or bundled pricing.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .catalog import StaticCatalog
from .config import MatcherConfig, find_config_file, get_config, load_config
from .matcher import InstanceMatcher
from .pricing_sources import StaticPricingProvider
from .schema import (
    Architecture,
    ComputeRequirements,
    InstanceMatch,
    MatchingOptions,
    StorageType,
    WeightFactors,
)
from .workloads import RESEARCH_WORKLOADS, get_workload

console = Console()


@click.group()
@click.version_option(version="1.0.0", prog_name="instance-matcher")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True),
    help="Path to matcher-config.yaml (default: search standard locations)"
)
@click.option(
    "--catalog", "-c",
    type=click.Path(exists=True),
    help="Instance catalog JSON file (default: bundled sample catalog)"
)
@click.option(
    "--pricing", "-p",
    type=click.Path(exists=True),
    help="Hourly rates JSON file (default: bundled sample rates)"
)
@click.option(
    "--aws", "use_aws",
    is_flag=True,
    help="Use live EC2 and Pricing APIs instead of local data"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable debug logging"
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Optional[str],
    catalog: Optional[str],
    pricing: Optional[str],
    use_aws: bool,
    verbose: bool,
):
    """Instance Matching and Recommendation Engine.

    Scores EC2 instance types against compute requirements, blending
    performance fit, cost efficiency and right-sizing into a ranked list
    with reasons for each candidate.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    path = Path(config_path) if config_path else find_config_file()
    config = load_config(path) if path else get_config()

    ctx.ensure_object(dict)
    ctx.obj.update(
        config=config,
        catalog=catalog,
        pricing=pricing,
        use_aws=use_aws,
    )


def build_matcher(obj: dict) -> InstanceMatcher:
    """Build a matcher from the group-level source options."""
    config: MatcherConfig = obj["config"]

    if obj["use_aws"]:
        from .aws import AWSService

        service = AWSService(config.aws)
        return InstanceMatcher(service, service, default_weights=config.weight_factors)

    catalog = StaticCatalog.from_file(obj["catalog"]) if obj["catalog"] else StaticCatalog.sample()
    pricing = (
        StaticPricingProvider.from_file(obj["pricing"])
        if obj["pricing"]
        else StaticPricingProvider.sample()
    )
    return InstanceMatcher(catalog, pricing, default_weights=config.weight_factors)


def requirement_options(func):
    """Attach the compute requirement options to a command."""
    options = [
        click.option("--min-vcpus", type=click.IntRange(min=1), help="Minimum vCPUs"),
        click.option("--max-vcpus", type=click.IntRange(min=1), help="Maximum vCPUs"),
        click.option("--min-memory", type=float, help="Minimum memory (GiB)"),
        click.option("--max-memory", type=float, help="Maximum memory (GiB)"),
        click.option("--gpu", "require_gpu", is_flag=True, help="Require a GPU"),
        click.option("--min-gpu-memory", type=click.IntRange(min=1), help="Minimum GPU memory (GiB)"),
        click.option(
            "--arch",
            type=click.Choice([a.value for a in Architecture]),
            help="Processor architecture"
        ),
        click.option(
            "--network", "-n",
            multiple=True,
            help="Preferred network performance label (repeatable), e.g. '25 Gigabit'"
        ),
        click.option(
            "--storage",
            type=click.Choice([s.value for s in StorageType]),
            help="Storage type"
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def output_options(func):
    """Attach the output format options to a command."""
    func = click.option(
        "--out", "-o",
        type=click.Path(),
        help="Also write JSON results to this file"
    )(func)
    func = click.option(
        "--json-output", "-j",
        is_flag=True,
        help="Output raw JSON instead of formatted text"
    )(func)
    return func


def run_with_status(coro, message: str, quiet: bool = False):
    """Run a matcher coroutine, showing a spinner unless quiet."""
    if quiet:
        return asyncio.run(coro)
    with console.status(message):
        return asyncio.run(coro)


def build_requirements(
    min_vcpus: Optional[int],
    max_vcpus: Optional[int],
    min_memory: Optional[float],
    max_memory: Optional[float],
    require_gpu: bool,
    min_gpu_memory: Optional[int],
    arch: Optional[str],
    network: tuple,
    storage: Optional[str],
) -> ComputeRequirements:
    return ComputeRequirements(
        min_vcpus=min_vcpus,
        max_vcpus=max_vcpus,
        min_memory_gib=min_memory,
        max_memory_gib=max_memory,
        require_gpu=require_gpu,
        min_gpu_memory_gib=min_gpu_memory,
        architecture=Architecture(arch) if arch else None,
        network_performance=list(network),
        storage_type=StorageType(storage) if storage else None,
    )


def build_options(
    config: MatcherConfig,
    max_results: Optional[int],
    no_spot: bool,
    weights: tuple[Optional[float], Optional[float], Optional[float]],
) -> MatchingOptions:
    """Merge command flags over the configured defaults."""
    options = config.matching_options()
    performance, cost, efficiency = weights
    return MatchingOptions(
        max_results=max_results or options.max_results,
        include_spot_pricing=options.include_spot_pricing and not no_spot,
        weight_factors=WeightFactors(
            performance=options.weight_factors.performance if performance is None else performance,
            cost=options.weight_factors.cost if cost is None else cost,
            efficiency=options.weight_factors.efficiency if efficiency is None else efficiency,
        ),
    )


@main.command("match")
@requirement_options
@click.option("--max-results", "-m", type=click.IntRange(min=1), help="Maximum number of matches")
@click.option("--no-spot", is_flag=True, help="Skip spot price lookups")
@click.option("--weight-performance", type=float, help="Blend weight for performance score")
@click.option("--weight-cost", type=float, help="Blend weight for cost score")
@click.option("--weight-efficiency", type=float, help="Blend weight for efficiency score")
@output_options
@click.pass_obj
def match_cmd(
    obj: dict,
    max_results: Optional[int],
    no_spot: bool,
    weight_performance: Optional[float],
    weight_cost: Optional[float],
    weight_efficiency: Optional[float],
    json_output: bool,
    out: Optional[str],
    **requirement_args,
):
    """Rank instance types that meet the given requirements.

    Examples:
        instance-matcher match --min-vcpus 2 --min-memory 8
        instance-matcher match --gpu --min-gpu-memory 16 -m 3
        instance-matcher --aws match --min-vcpus 16 --arch arm64
    """
    try:
        requirements = build_requirements(**requirement_args)
        options = build_options(
            obj["config"],
            max_results,
            no_spot,
            (weight_performance, weight_cost, weight_efficiency),
        )
        matcher = build_matcher(obj)

        matches = run_with_status(
            matcher.match_instances(requirements, options),
            "Matching instances...",
            quiet=json_output,
        )

        emit_matches(matches, json_output, out, title="Instance Matches")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("workload")
@click.argument("workload_id")
@click.option("--max-results", "-m", type=click.IntRange(min=1), help="Maximum number of matches")
@click.option("--no-spot", is_flag=True, help="Skip spot price lookups")
@output_options
@click.pass_obj
def workload_cmd(
    obj: dict,
    workload_id: str,
    max_results: Optional[int],
    no_spot: bool,
    json_output: bool,
    out: Optional[str],
):
    """Rank instance types for a preset research workload.

    Run 'instance-matcher workloads' to list the presets.
    """
    try:
        workload = get_workload(workload_id)
    except KeyError:
        console.print(f"[red]Unknown workload: {workload_id}[/red]")
        console.print("Available: " + ", ".join(w.id for w in RESEARCH_WORKLOADS))
        sys.exit(1)

    try:
        options = build_options(obj["config"], max_results, no_spot, (None, None, None))
        matcher = build_matcher(obj)

        matches = run_with_status(
            matcher.match_for_workload(workload, options),
            f"Matching instances for {workload.name}...",
            quiet=json_output,
        )

        emit_matches(matches, json_output, out, title=workload.name)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("best")
@requirement_options
@click.option("--no-spot", is_flag=True, help="Skip spot price lookups")
@output_options
@click.pass_obj
def best_cmd(obj: dict, no_spot: bool, json_output: bool, out: Optional[str], **requirement_args):
    """Show the single best instance type for the requirements."""
    try:
        requirements = build_requirements(**requirement_args)
        options = build_options(obj["config"], None, no_spot, (None, None, None))
        matcher = build_matcher(obj)

        best = asyncio.run(matcher.get_best_match(requirements, options))
        data = best.model_dump(mode="json") if best is not None else None

        if json_output:
            write_json(data, None)
        elif best is None:
            console.print("[yellow]No instance type meets these requirements.[/yellow]")
        else:
            display_matches([best], "Best Match", verbose=True)

        if out:
            write_json(data, out)
            if not json_output:
                console.print(f"\n[green]Result saved to {out}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("compare")
@click.argument("instance_types", nargs=-1, required=True)
@requirement_options
@output_options
@click.pass_obj
def compare_cmd(
    obj: dict,
    instance_types: tuple,
    json_output: bool,
    out: Optional[str],
    **requirement_args,
):
    """Score specific instance types side by side.

    Instances are shown in catalog order, not ranked.

    Example:
        instance-matcher compare m5.large c5.xlarge --min-vcpus 2
    """
    try:
        requirements = build_requirements(**requirement_args)
        matcher = build_matcher(obj)

        matches = asyncio.run(matcher.compare_instances(list(instance_types), requirements))

        if not matches and not json_output:
            console.print(f"[yellow]None of {', '.join(instance_types)} found in catalog.[/yellow]")
            return

        emit_matches(matches, json_output, out, title="Comparison", ranked=False)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("workloads")
def workloads_cmd():
    """List preset research workloads."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Requirements")

    for workload in RESEARCH_WORKLOADS:
        table.add_row(
            workload.id,
            workload.name,
            workload.category.value,
            describe_requirements(workload.requirements),
        )

    console.print(table)


@main.command("init-config")
@click.option(
    "--out", "-o",
    type=click.Path(),
    default="matcher-config.yaml",
    help="Output path for the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing config file"
)
def init_config_cmd(out: str, force: bool):
    """Generate a default matcher configuration file.

    Example:
        instance-matcher init-config --out my-config.yaml
    """
    from .config import save_default_config

    out_path = Path(out)
    if out_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {out}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        save_default_config(out_path)
        console.print(f"[green]✓[/green] Config file created: {out}")
        console.print("\nThis file configures:")
        console.print("  • weight_factors - How performance, cost and efficiency are blended")
        console.print("  • max_results / include_spot_pricing - Default match options")
        console.print("  • aws - Region, endpoint and filters for live lookups")
        console.print("\nThe matcher will look for config in this order:")
        console.print("  1. INSTANCE_MATCHER_CONFIG environment variable")
        console.print("  2. ./matcher-config.yaml (current directory)")
        console.print("  3. ~/.config/instance-matcher/config.yaml")
    except Exception as e:
        console.print(f"[red]Error creating config:[/red] {e}")
        sys.exit(1)


def describe_requirements(requirements: ComputeRequirements) -> str:
    """One-line summary of the set requirement fields."""
    parts = []
    if requirements.min_vcpus or requirements.max_vcpus:
        parts.append(f"vCPU {requirements.min_vcpus or '-'}..{requirements.max_vcpus or '-'}")
    if requirements.min_memory_gib or requirements.max_memory_gib:
        parts.append(
            f"mem {requirements.min_memory_gib or '-'}..{requirements.max_memory_gib or '-'} GiB"
        )
    if requirements.require_gpu:
        gpu = "GPU"
        if requirements.min_gpu_memory_gib:
            gpu += f" >= {requirements.min_gpu_memory_gib} GiB"
        parts.append(gpu)
    if requirements.architecture:
        parts.append(requirements.architecture.value)
    if requirements.storage_type:
        parts.append(f"storage {requirements.storage_type.value}")
    return ", ".join(parts) or "any"


def format_rate(rate: float) -> str:
    return f"${rate:.4f}" if rate > 0 else "[dim]n/a[/dim]"


def emit_matches(
    matches: list[InstanceMatch],
    json_output: bool,
    out: Optional[str],
    title: str,
    ranked: bool = True,
    verbose: bool = False,
):
    """Print matches as JSON or a table, optionally saving JSON to a file."""
    if json_output:
        output_json(matches, None)
        if out:
            output_json(matches, out)
        return

    display_matches(matches, title, ranked=ranked, verbose=verbose)
    if out:
        output_json(matches, out)
        console.print(f"\n[green]Results saved to {out}[/green]")


def display_matches(matches: list[InstanceMatch], title: str, ranked: bool = True, verbose: bool = False):
    """Display matches in formatted text."""
    if not matches:
        console.print("[yellow]No instance types meet these requirements.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    if ranked:
        table.add_column("#", justify="right")
    table.add_column("Instance", style="cyan", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("vCPU", justify="right")
    table.add_column("Memory", justify="right")
    table.add_column("GPU")
    table.add_column("On-Demand", justify="right")
    table.add_column("RI 1yr", justify="right")
    table.add_column("RI 3yr", justify="right")
    table.add_column("Spot", justify="right")

    for i, match in enumerate(matches, 1):
        instance = match.instance
        score_color = "green" if match.match_score >= 70 else "yellow" if match.match_score >= 50 else "red"
        row = [
            instance.InstanceType,
            f"[{score_color}]{match.match_score}[/{score_color}]",
            str(instance.vcpus),
            f"{instance.memory_gib:g} GiB",
            instance.gpu_name or "-",
            format_rate(match.pricing.on_demand),
            format_rate(match.pricing.reserved_1yr),
            format_rate(match.pricing.reserved_3yr),
            format_rate(match.pricing.spot_current),
        ]
        if ranked:
            row.insert(0, str(i))
        table.add_row(*row)

    console.print(table)

    console.print("\n[bold]Why:[/bold]")
    for match in matches:
        b = match.breakdown
        console.print(
            f"  [bold cyan]{match.instance_type}[/bold cyan] "
            f"[dim](performance {b.performance}, cost {b.cost}, efficiency {b.efficiency})[/dim]"
        )
        reasons = match.match_reasons if verbose else match.match_reasons[:4]
        for reason in reasons:
            console.print(f"    [green]•[/green] {reason}")
        if len(match.match_reasons) > len(reasons):
            console.print(f"    [dim]... and {len(match.match_reasons) - len(reasons)} more[/dim]")


def output_json(matches: list[InstanceMatch], out_path: Optional[str]):
    """Output matches as JSON."""
    write_json([m.model_dump(mode="json") for m in matches], out_path)


def write_json(data, out_path: Optional[str]):
    """Print JSON to stdout, or write it to out_path."""
    json_str = json.dumps(data, indent=2)

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


if __name__ == "__main__":
    main()
