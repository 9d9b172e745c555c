from datetime import timedelta

from fncli import cli

from . import store
from .lib import clock
from .lib.dates import get_week_start, normalize_month
from .lib.errors import echo
from .lib.render import render_month, render_week


@cli("habitual")
def week(offset: int = 0):
    """Show the Sunday-first week grid (--offset -1 for last week)"""
    now = clock.now()
    start = get_week_start(now.date()) + timedelta(weeks=offset)
    echo(render_week(store.load_tasks(), start, now))


@cli("habitual")
def month(offset: int = 0):
    """Show the month calendar per habit (--offset -1 for last month)"""
    now = clock.now()
    year, month0 = normalize_month(now.year, now.month - 1 + offset)
    echo(render_month(store.load_tasks(), year, month0, now))
