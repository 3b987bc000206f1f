"""Plain-text rendering of summaries and policy listings."""

from .models import EscalationPolicy, ParticipantTotal

_RULE = '-' * 60


def render_summary(totals: list[ParticipantTotal]) -> str:
    lines = [
        '',
        'On-Call Time Summary',
        _RULE,
        f"{'User':<40} {'Hours':>10}",
        _RULE,
    ]
    for total in totals:
        lines.append(f"{total.label:<40} {total.hours:>10.2f}")
    return '\n'.join(lines)


def render_policies(policies: list[EscalationPolicy]) -> str:
    lines = ['Escalation Policy IDs and Names:']
    for policy in policies:
        lines.append(f"{policy.id} — {policy.summary}")
    return '\n'.join(lines)
