"""
Workflow Studio CLI
"""
import asyncio
import json
import random
import sys

import click

from .config import EngineSettings, configure_logging
from .core import (
    WorkflowExecutionEngine, WorkflowParser, WorkflowValidator,
    SimulatedNodeExecutor, execution_levels
)
from .exceptions import WorkflowEngineError


def _load(workflow_file):
    try:
        return WorkflowParser().parse_file(workflow_file)
    except WorkflowEngineError as e:
        raise click.ClickException(str(e))


@click.group()
@click.option('--log-level', default=None, help='Logging level (defaults to WORKFLOW_LOG_LEVEL)')
@click.pass_context
def cli(ctx, log_level):
    """Workflow Studio CLI"""
    settings = EngineSettings.from_env()
    configure_logging(log_level or settings.log_level)
    ctx.obj = settings


@cli.command()
@click.argument('workflow_file', type=click.Path(exists=True, dir_okay=False))
def validate(workflow_file):
    """Validate a workflow graph"""
    workflow = _load(workflow_file)
    result = WorkflowValidator().validate(workflow.nodes, workflow.edges)
    if not result.valid:
        click.echo(f"Invalid: {result.error}", err=True)
        sys.exit(1)
    click.echo(f"Valid: {len(workflow.nodes)} nodes, {len(workflow.edges)} edges")


@cli.command()
@click.argument('workflow_file', type=click.Path(exists=True, dir_okay=False))
def order(workflow_file):
    """Print the execution order of a workflow"""
    workflow = _load(workflow_file)
    try:
        levels = execution_levels(workflow.nodes, workflow.edges)
    except WorkflowEngineError as e:
        raise click.ClickException(str(e))

    for depth, level in enumerate(levels):
        labels = ", ".join(f"{node.id} ({node.label})" for node in level)
        click.echo(f"{depth}: {labels}")


@cli.command()
@click.argument('workflow_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--seed', type=int, default=None, help='Random seed for the simulated executor')
@click.option('--min-latency', type=float, default=None, help='Minimum simulated node latency (s)')
@click.option('--max-latency', type=float, default=None, help='Maximum simulated node latency (s)')
@click.pass_obj
def run(settings, workflow_file, seed, min_latency, max_latency):
    """Run a workflow with the simulated node executor"""
    workflow = _load(workflow_file)
    executor = SimulatedNodeExecutor(
        settings.sim_min_latency if min_latency is None else min_latency,
        settings.sim_max_latency if max_latency is None else max_latency,
        rng=random.Random(seed)
    )
    engine = WorkflowExecutionEngine(node_executor=executor, settings=settings)

    async def _run():
        def report(event):
            payload = event.payload
            node = workflow.get_node(payload.node_id) if payload.node_id else None
            if node is not None:
                click.echo(f"[{payload.event_type.value}] {node.id} ({node.label})")

        await engine.subscribe(report)
        return await engine.execute_workflow(
            workflow.nodes, workflow.edges, workflow_id=workflow.id
        )

    try:
        result = asyncio.run(_run())
    except WorkflowEngineError as e:
        click.echo(f"Execution failed: {engine.last_error or e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2, default=str))
    if result.errors:
        sys.exit(1)


@cli.command()
@click.argument('workflow_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', 'fmt', type=click.Choice(['json', 'yaml']), default='json')
def export(workflow_file, fmt):
    """Re-serialise a workflow in normalised form"""
    parser = WorkflowParser()
    click.echo(parser.serialize(_load(workflow_file), fmt=fmt))


def main():
    """Main entry point"""
    cli()


if __name__ == '__main__':
    main()
