"""shows the region hierarchy along with the statistics of each region"""

from django.core.management.base import BaseCommand

from regionwatch.models.region import Region
from regionwatch.core.aggregation import find_inconsistent_regions
from regionwatch.core.regionstores import DjangoRegionStore, DjangoPersonRegistry
from regionwatch.core.regiontree import subtree_preorder


class Command(BaseCommand):
    """
    This script displays the region tree in the django db
    """

    help = "Displays the region tree and each region's statistics"

    def add_arguments(self, parser):  # skipcq: PYL-R0201
        parser.add_argument("--root", help="only the subtree under this region")
        parser.add_argument(
            "--check",
            action="store_true",
            help="list regions whose stored statistics are out of date",
        )

    def show_region(self, region: Region):
        """one line per region, indented by depth"""
        flag = " [UNDER THREAT]" if region.under_threat else ""
        print(
            f"{'  ' * region.kind.depth}{region.region_type} {region.id} {region.name}: "
            f"population={region.population_count} "
            f"rating={region.average_social_rating:.2f} "
            f"important={region.important_persons_count}{flag}"
        )

    def handle(self, *args, **options):
        region_store = DjangoRegionStore()

        if options["root"]:
            root = region_store.find_by_id(options["root"])
            if root is None:
                print("no such region")
                return
            roots = [root]
        else:
            roots = list(Region.objects.filter(parent__isnull=True).order_by("id"))

        region_ids = []
        for root in roots:
            for region in subtree_preorder(region_store, root):
                self.show_region(region)
                region_ids.append(region.id)

        if options["check"]:
            stale = find_inconsistent_regions(region_store, DjangoPersonRegistry(), region_ids)
            if stale:
                print("out of date: " + ", ".join(stale))
            else:
                print("all regions are up to date")
