"""gcli - Command-line interface for multi-account Gmail and Calendar."""

import logging
import os

import click
from dotenv import load_dotenv

from gcli import __version__


# Configure logging at the application level
if not logging.root.handlers:
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.WARNING),
                        format='%(asctime)s - %(levelname)s - %(message)s')
# Suppress noisy INFO logs from googleapiclient and google_auth_oauthlib
logging.getLogger('googleapiclient.discovery').setLevel(logging.WARNING)
logging.getLogger('googleapiclient.discovery_cache').setLevel(logging.WARNING)
logging.getLogger('google_auth_oauthlib.flow').setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


from .auth_commands import auth as auth_module
from .config_commands import config_group as config_module
from .mail_commands import mail as mail_module
from .calendar_commands import cal as cal_module


@click.group()
@click.version_option(__version__, prog_name="gcli")
@click.option('--json', '-j', 'json_output', is_flag=True, help='Output in JSON format.')
@click.pass_context
def gcli(ctx, json_output):
    """gcli - Gmail and Google Calendar from the terminal.

    Manage several Google accounts' email and calendars. Commands that read
    data accept -a NAME for one account or --all to query every account at
    once.
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output


gcli.add_command(auth_module, name='auth')
gcli.add_command(config_module, name='config')
gcli.add_command(mail_module, name='mail')
gcli.add_command(cal_module, name='cal')


def main():
    """Entry point for the CLI."""
    load_dotenv()
    gcli(obj={})


if __name__ == "__main__":
    main()
