"""Management command to print the loyalty leaderboard."""

from django.core.management.base import BaseCommand, CommandError

from pointsman.conf import pointsman_settings
from pointsman.services.summaries import SummaryService


class Command(BaseCommand):
    help = "Print enrolled clients ordered by points balance"

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=None,
            help="Override DEFAULT_LEADERBOARD_LIMIT setting",
        )

    def handle(self, *args, **options):
        limit = options["limit"]
        if limit is None:
            limit = pointsman_settings.DEFAULT_LEADERBOARD_LIMIT
        if limit < 1:
            raise CommandError("--limit must be a positive integer")
        summaries = SummaryService.list_summaries(limit=limit)

        if not summaries:
            self.stdout.write("No enrolled clients.")
            return

        for rank, s in enumerate(summaries, start=1):
            to_next = f"{s.points_to_next} to {s.next_tier}" if s.next_tier else "max tier"
            self.stdout.write(
                f"{rank:>3}. {s.client_code:<15} {s.balance:>8} pts  "
                f"{s.tier_label:<10} {s.progress_percent:>3}%  ({to_next})"
            )
        self.stdout.write(self.style.SUCCESS(f"{len(summaries)} clients listed."))
