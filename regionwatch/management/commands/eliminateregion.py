from django.core.management.base import BaseCommand

from regionwatch.core.exceptions import RegionStatsError, PartialPropagationError
from regionwatch.services.region_stats_service import RegionStatsService


class Command(BaseCommand):
    """
    Eliminates everyone in a region which is under threat, then recomputes
    the region's subtree and its ancestors
    """

    help = "Eliminates a region which is under threat"

    def add_arguments(self, parser):  # skipcq: PYL-R0201
        parser.add_argument("region")
        parser.add_argument("--deadline", type=float, help="seconds the elimination may take")
        parser.add_argument("--yes-really", action="store_true")

    def handle(self, *args, **options):
        if not options["yes_really"]:
            print("pass --yes-really to eliminate " + options["region"])
            return

        try:
            result = RegionStatsService().eliminate(options["region"], deadline=options["deadline"])
        except PartialPropagationError as error:
            print(f"WARNING: {error.message}")
            print(f"re-run recompute_region_stats starting from {error.last_succeeded_id}")
            return
        except RegionStatsError as error:
            print(error.message)
            return

        print(
            f"eliminated {result.eliminated_count} people in {options['region']}; "
            f"{len(result.affected_region_ids)} regions recomputed, "
            f"ancestors updated: {', '.join(result.propagated_region_ids) or 'none'}"
        )
        if result.refreshed_region_ids:
            print(f"also refreshed: {', '.join(result.refreshed_region_ids)}")
