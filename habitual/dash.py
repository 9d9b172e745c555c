from fncli import cli

from . import store
from .lib import clock
from .lib.dates import get_week_start
from .lib.errors import echo
from .lib.render import render_stats, render_week
from .tasks import calculate_new_task_stats


@cli("habitual")
def stats():
    """Show totals, today's completion rate and the best current streak"""
    echo(render_stats(calculate_new_task_stats(store.load_tasks())))


@cli("habitual", name="dash", default=True)
def dashboard():
    """Stats line plus this week's grid"""
    now = clock.now()
    tasks = store.load_tasks()
    echo(render_stats(calculate_new_task_stats(tasks, now)))
    echo()
    echo(render_week(tasks, get_week_start(now.date()), now))
