"""
Command line for running and seeding the friendnet services.

.. code-block:: bash

   $ friendnet create-tables
   $ friendnet add-user alice --password secret --partition US --row Alice,A
   $ friendnet serve gateway

.. warning: ``add-user`` is for dev/test purposes only.

"""

from importlib import import_module

import click

from . import storage
from .domain import AUTH_PARTITION, AUTH_TABLE, DATA_PARTITION, DATA_ROW, \
    DATA_TABLE, FRIENDS, PASSWORD, STATUS, UPDATES
from .gateway.factory import create_app as create_gateway_app

SERVICES = ('gateway', 'issuer', 'users', 'push')


@click.group()
def cli() -> None:
    """Run and seed the friendnet services."""


@cli.command()
@click.argument('service', type=click.Choice(SERVICES))
@click.option('--port', type=int, default=None,
              help="Defaults to the service's configured PORT.")
@click.option('--debug', is_flag=True, default=False)
def serve(service: str, port: int, debug: bool) -> None:
    """Run one of the services with the Flask development server."""
    factory = import_module(f'friendnet.{service}.factory')
    app = factory.create_app()
    app.run(port=port or app.config['PORT'], debug=debug, threaded=True)


@cli.command('create-tables')
def create_tables() -> None:
    """Create the credential and data tables."""
    app = create_gateway_app()
    with app.app_context():
        storage.create_all()
        for table in (AUTH_TABLE, DATA_TABLE):
            if storage.create_table(table):
                click.echo(f'Created {table}')
            else:
                click.echo(f'{table} already exists')


@cli.command('add-user')
@click.argument('userid')
@click.option('--password', prompt='Password', hide_input=True)
@click.option('--partition', prompt='Data partition (country)')
@click.option('--row', prompt='Data row (name)')
def add_user(userid: str, password: str, partition: str, row: str) -> None:
    """Add a credential and an empty data entity for a user."""
    app = create_gateway_app()
    with app.app_context():
        storage.create_all()
        for table in (AUTH_TABLE, DATA_TABLE):
            storage.create_table(table)
        storage.insert_or_merge_entity(AUTH_TABLE, AUTH_PARTITION, userid, {
            PASSWORD: password,
            DATA_PARTITION: partition,
            DATA_ROW: row
        })
        storage.insert_or_merge_entity(DATA_TABLE, partition, row, {
            FRIENDS: '',
            STATUS: '',
            UPDATES: ''
        })
    click.echo(f'Added {userid} with data at {partition}/{row}')


if __name__ == '__main__':
    cli()
