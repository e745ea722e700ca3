# ABOUTME: Shared Click options for bibresolve CLI commands.
# ABOUTME: Provides reusable decorators for the --json and --deadline flags.

import click

json_option = click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the record as JSON instead of a table.",
)

deadline_option = click.option(
    "--deadline",
    type=click.FloatRange(min=0.0, min_open=True),
    default=None,
    help="Abandon the lookup, including any request in flight, after this many seconds.",
)
