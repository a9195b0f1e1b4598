import logging

from django.core.management.base import BaseCommand

from infrastructure.container import container
from marketplace.demo_data import ADMIN_EMAIL, seed_demo_data


logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Seeds the default admin, demo businesses and demo listings into the marketplace store."

    def add_arguments(self, parser):
        parser.add_argument(
            "--business-password",
            default=None,
            help="Password for the demo business accounts (default: accounts cannot log in)",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("Seeding demo data..."))

        created = seed_demo_data(container.context(), business_password=options["business_password"])

        if created["users"] or created["listings"]:
            self.stdout.write(
                self.style.SUCCESS(f"Created {created['users']} users and {created['listings']} listings.")
            )
        else:
            self.stdout.write(self.style.WARNING("Demo data already present, nothing created."))
        self.stdout.write(f"Admin login: {ADMIN_EMAIL}")
