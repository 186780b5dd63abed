from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from equipment.models import Equipment
from insurance.models import InsurancePolicy

User = get_user_model()

EQUIPMENT_SEEDS = [
    {
        "title": "Sony A7 IV Body",
        "brand": "Sony",
        "category": Equipment.Category.CAMERA,
        "price_per_day": 450_000,
        "replacement_price": 55_000_000,
    },
    {
        "title": "Canon RF 70-200mm f/2.8",
        "brand": "Canon",
        "category": Equipment.Category.LENS,
        "price_per_day": 350_000,
        "replacement_price": 62_000_000,
    },
    {
        "title": "Aputure 600d Pro",
        "brand": "Aputure",
        "category": Equipment.Category.LIGHTING,
        "price_per_day": 600_000,
        "replacement_price": 38_000_000,
    },
    {
        "title": "Rode Wireless GO II",
        "brand": "Rode",
        "category": Equipment.Category.AUDIO,
        "price_per_day": 150_000,
        "replacement_price": 7_500_000,
    },
]

INSURANCE_SEEDS = [
    {
        "name": "Basic cover",
        "description": "Covers minor damage up to 5,000,000.",
        "min_coverage": 1_000_000,
        "max_coverage": 5_000_000,
    },
    {
        "name": "Full cover",
        "description": "Covers theft and accidental damage.",
        "min_coverage": 8_000_000,
        "max_coverage": 20_000_000,
    },
]


class Command(BaseCommand):
    help = "Create demo equipment and insurance policies for local development."

    def add_arguments(self, parser):
        parser.add_argument(
            "--owner",
            default="demo-owner",
            help="Username that will own the seeded equipment (created if missing).",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        username = (options.get("owner") or "").strip()
        if not username:
            raise CommandError("--owner must not be empty.")

        owner, created = User.objects.get_or_create(
            username=username,
            defaults={"can_list": True, "can_rent": True},
        )
        if created:
            owner.set_unusable_password()
            owner.save(update_fields=["password"])

        equipment_count = 0
        for seed in EQUIPMENT_SEEDS:
            _, was_created = Equipment.objects.get_or_create(
                owner=owner,
                title=seed["title"],
                defaults=seed,
            )
            equipment_count += int(was_created)

        policy_count = 0
        for seed in INSURANCE_SEEDS:
            _, was_created = InsurancePolicy.objects.get_or_create(
                name=seed["name"],
                defaults=seed,
            )
            policy_count += int(was_created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {equipment_count} equipment item(s) and {policy_count} policy(ies)."
            )
        )
