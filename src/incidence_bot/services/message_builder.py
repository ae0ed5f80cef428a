"""
Message Builder.

Formats the German status and alert messages posted to Discord.
"""

from incidence_bot.services.models import IncidenceReport

STATUS_TEMPLATE = "Inzidenzwert für den {date}: **{incidence}**"
ALERT_TEMPLATE = "{mention} Distanzunterricht, wooow"


class MessageBuilder:
    """Builds chat messages from an incidence report."""

    def __init__(
        self,
        status_template: str = STATUS_TEMPLATE,
        alert_template: str = ALERT_TEMPLATE,
    ):
        self.status_template = status_template
        self.alert_template = alert_template

    def build_status(self, report: IncidenceReport) -> str:
        """Status message, e.g. "Inzidenzwert für den 01.05.2021: **200**"."""
        return self.status_template.format(date=report.date, incidence=report.incidence)

    def build_alert(self, mention: str) -> str:
        """Alert message addressed to the given mention token."""
        return self.alert_template.format(mention=mention)
