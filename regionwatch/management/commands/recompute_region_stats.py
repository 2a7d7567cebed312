from django.core.management.base import BaseCommand

from regionwatch.core.exceptions import RegionStatsError
from regionwatch.services.region_stats_service import RegionStatsService


class Command(BaseCommand):
    """
    Recomputes region statistics from the people in the db.
    Run once after loading data so that every region starts out consistent
    """

    help = "Recomputes the statistics of every region, or of one region and its ancestors"

    def add_arguments(self, parser):  # skipcq: PYL-R0201
        parser.add_argument("--region", help="only this region")
        parser.add_argument(
            "--propagate", action="store_true", help="also recompute the region's ancestors"
        )

    def handle(self, *args, **options):
        service = RegionStatsService()

        if options["region"] is None:
            updated = service.recompute_all()
            print(f"recomputed {len(updated)} regions")
            for region in updated:
                if region.under_threat:
                    print(f"  under threat: {region.id} {region.name}")
            return

        try:
            if options["propagate"]:
                updated = service.recompute_and_propagate(options["region"])
            else:
                updated = [service.recompute(options["region"])]
        except RegionStatsError as error:
            print(error.message)
            return

        for region in updated:
            print(
                f"{region.id:20} population={region.population_count} "
                f"rating={region.average_social_rating:.2f} "
                f"important={region.important_persons_count} "
                f"under_threat={region.under_threat}"
            )
