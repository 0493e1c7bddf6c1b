"""
Sieve script generator — renders one Filter as a Proton Mail Sieve script.

Output shape:

    # Filter: Boss
    # Generated: Mon, Oct 19, 2026, 3:04 PM

    require ["fileinto", "imap4flags"];

    if allof (not hasflag "\\\\Deleted",
           address :is "from" "boss@example.com") {
        addflag "\\\\Seen";
        fileinto "Work";
        stop;
    }

Values are quoted but not escaped; a double quote inside a label, folder or
address produces a script Proton will reject.
"""
from datetime import datetime
from typing import List, Optional

from sievebox.config import EXTENSION_FILEINTO, EXTENSION_FLAGS, EXTENSION_EXPIRE
from sievebox.models.filter import Filter

NOT_DELETED = 'not hasflag "\\\\Deleted"'
MARK_SEEN = 'addflag "\\\\Seen";'

_CONDITION_JOIN = ',\n       '
_INDENT = '    '


def effective_labels(filter: Filter, year: int) -> List[str]:
    """Configured labels plus the year label, without duplicating it."""
    labels = list(filter.labels)
    if filter.add_year_label:
        year_label = str(year)
        if year_label not in labels:
            labels.append(year_label)
    return labels


def is_domain_pattern(address: str) -> bool:
    """'newsletter.com' and '@newsletter.com' match by domain, 'a@b.com' exactly."""
    return '@' not in address or address.startswith('@')


_DAYS = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')
_MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
           'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


def format_timestamp(now: datetime) -> str:
    """en-US style 'Mon, Oct 19, 2026, 3:04 PM', independent of the process locale."""
    hour = now.hour % 12 or 12
    return f"{_DAYS[now.weekday()]}, {_MONTHS[now.month - 1]} {now.day}, {now.year}, {hour}:{now:%M} {'AM' if now.hour < 12 else 'PM'}"


def required_extensions(filter: Filter, labels: List[str]) -> List[str]:
    requires = []
    if filter.target_folder or labels:
        requires.append(EXTENSION_FILEINTO)
    # Needed for markRead and for the not-deleted guard.
    requires.append(EXTENSION_FLAGS)
    if filter.expiration_days is not None:
        requires.append(EXTENSION_EXPIRE)
    return requires


def build_conditions(filter: Filter) -> List[str]:
    conditions = [NOT_DELETED]

    if filter.from_addresses:
        full = [a for a in filter.from_addresses if not is_domain_pattern(a)]
        domains = [a.lstrip('@') for a in filter.from_addresses if is_domain_pattern(a)]
        domains = [d for d in domains if d]

        from_conditions = []
        if len(full) == 1:
            from_conditions.append(f'address :is "from" "{full[0]}"')
        elif len(full) > 1:
            quoted = ', '.join(f'"{a}"' for a in full)
            from_conditions.append(f'address :is "from" [{quoted}]')
        for domain in domains:
            from_conditions.append(f'address :domain :contains "from" "{domain}"')

        if len(from_conditions) == 1:
            conditions.append(from_conditions[0])
        elif len(from_conditions) > 1:
            conditions.append(f"anyof ({', '.join(from_conditions)})")

    if filter.to_address:
        conditions.append(f'address :is "to" "{filter.to_address}"')

    return conditions


def build_actions(filter: Filter, labels: List[str]) -> List[str]:
    """Order matters: expire, flag, labels, folder, then stop or keep."""
    actions = []
    if filter.expiration_days is not None:
        actions.append(f'expire "day" "{filter.expiration_days}";')
    if filter.mark_read:
        actions.append(MARK_SEEN)
    for label in labels:
        actions.append(f'fileinto "{label}";')
    if filter.target_folder:
        actions.append(f'fileinto "{filter.target_folder}";')

    if filter.target_folder or labels:
        actions.append('stop;')
    else:
        actions.append('keep;')
    return actions


def generate_sieve_script(filter: Filter, now: Optional[datetime] = None) -> str:
    """
    Render a filter as Sieve text.

    `now` drives both the header timestamp and the year label; pass a fixed
    value for reproducible output.
    """
    now = now or datetime.now()
    labels = effective_labels(filter, now.year)
    requires = required_extensions(filter, labels)
    conditions = build_conditions(filter)
    actions = build_actions(filter, labels)

    lines = [
        f'# Filter: {filter.name}',
        f'# Generated: {format_timestamp(now)}',
        '',
    ]

    if requires:
        require_list = ', '.join(f'"{r}"' for r in requires)
        lines.append(f'require [{require_list}];')
        lines.append('')

    if conditions:
        lines.append(f'if allof ({_CONDITION_JOIN.join(conditions)}) {{')
    else:
        lines.append('if true {')

    for action in actions:
        lines.append(f'{_INDENT}{action}')

    lines.append('}')
    lines.append('')
    return '\n'.join(lines)
