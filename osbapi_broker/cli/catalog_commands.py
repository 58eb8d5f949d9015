"""CLI commands for catalog files."""

import json

import click
import yaml
from pydantic import ValidationError
from tabulate import tabulate

from osbapi_broker.models.catalog import Catalog
from osbapi_broker.services.catalog import load_catalog


def _load(path: str) -> Catalog:
    try:
        return load_catalog(path)
    except ValidationError as e:
        click.echo(f"❌ Invalid catalog {path}:", err=True)
        for error in e.errors():
            location = '.'.join(str(part) for part in error['loc']) or 'catalog'
            click.echo(f"   {location}: {error['msg']}", err=True)
        raise click.Abort()
    except (ValueError, yaml.YAMLError) as e:
        click.echo(f"❌ Invalid catalog {path}: {e}", err=True)
        raise click.Abort()


@click.group()
def catalog_cli():
    """Catalog file commands."""
    pass


@catalog_cli.command('validate')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def validate_catalog(path):
    """Validate a catalog file."""
    catalog = _load(path)
    plan_count = sum(len(service.plans) for service in catalog.services)
    click.echo(f"✅ Catalog is valid: {len(catalog.services)} services, {plan_count} plans")


@catalog_cli.command('show')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def show_catalog(path):
    """Show the services and plans of a catalog file."""
    catalog = _load(path)

    rows = []
    for service in catalog.services:
        for plan in service.plans:
            rows.append([
                service.name,
                service.id,
                plan.name,
                plan.id,
                'yes' if service.is_plan_bindable(plan) else 'no',
                'yes' if service.is_plan_updateable(plan) else 'no',
                plan.maintenance_info.version if plan.maintenance_info else '-'
            ])

    headers = ['Service', 'Service ID', 'Plan', 'Plan ID', 'Bindable', 'Updateable', 'Maintenance']
    click.echo(tabulate(rows, headers=headers, tablefmt='grid'))


@catalog_cli.command('export')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--indent', default=2, show_default=True, help='JSON indentation')
def export_catalog(path, indent):
    """Print a catalog file as the JSON served at /v2/catalog."""
    catalog = _load(path)
    click.echo(json.dumps(catalog.to_dict(), indent=indent))
