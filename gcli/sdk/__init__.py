"""gcli SDK - Core library for multi-account Gmail and Calendar access.

This SDK can be used by:
- The gcli CLI
- Third-party scripts that want the same account registry and store

Example usage:
    from gcli.sdk import accounts, mail, fanout

    # Unread mail across every configured account
    messages, errors = fanout.fan_out(
        accounts.get_all_account_names(),
        lambda name: mail.list_messages("is:unread", account=name),
        sort_key=fanout.chronological("date"),
    )
"""

from . import config
from . import accounts
from . import auth
from . import dates
from . import fanout
from . import mail
from . import calendar
