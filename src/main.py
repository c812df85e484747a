"""
Ride Matching Service - Simulation Runner

Loads a driver fleet, registers a handful of users, requests rides for them
(some preferring VIP drivers), completes every active ride and logs the
resulting fleet statistics.
"""

import argparse
import asyncio
import logging
import sys

from accounts.models import User
from core.exceptions import NoDriversAvailableError, RideShareError
from core.retry import RetryPolicy, with_retry
from directory import DirectoryClient
from directory.fake_records import (
    create_faker_instance,
    generate_driver_records,
    generate_user_names,
)
from matching import RideSharingService, init_service, reset_service
from settings import Settings, get_settings
from sim_logging import setup_logging

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a ride matching simulation")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Use seeded synthetic drivers and users instead of the remote directories",
    )
    parser.add_argument("--drivers", type=int, default=10, help="Synthetic fleet size (offline)")
    parser.add_argument(
        "--vip-ratio", type=float, default=0.5, help="Share of VIP drivers in the fleet"
    )
    parser.add_argument("--users", type=positive_int, default=4, help="Number of users to register")
    parser.add_argument("--rides", type=int, default=8, help="Number of rides to request")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    parser.add_argument(
        "--retry-attempts",
        type=int,
        default=1,
        help="Attempts per ride request when no driver is free",
    )
    return parser.parse_args(argv)


async def load_fleet(
    service: RideSharingService, settings: Settings, args: argparse.Namespace
) -> None:
    if args.offline:
        service.load_drivers(generate_driver_records(args.drivers, args.vip_ratio, args.seed))
        return

    records = await DirectoryClient.from_settings(settings.directory).fetch_drivers()
    fake = create_faker_instance(args.seed)
    vip_count = round(len(records) * args.vip_ratio)
    vip_ids = {r.driver_id for r in fake.random.sample(records, vip_count)}
    service.load_drivers(records, vip_ids=vip_ids)


async def register_users(
    service: RideSharingService, settings: Settings, args: argparse.Namespace
) -> list[User]:
    if args.offline:
        return [
            service.registry.create_user(name)
            for name in generate_user_names(args.users, args.seed)
        ]

    client = DirectoryClient.from_settings(settings.directory)
    return [
        await service.register_user_from(client, user_id)
        for user_id in range(1, args.users + 1)
    ]


async def run_simulation(args: argparse.Namespace, settings: Settings) -> dict:
    service = init_service(settings)
    try:
        await load_fleet(service, settings, args)

        users = await register_users(service, settings, args)
        fake = create_faker_instance(args.seed)
        policy = RetryPolicy(
            max_attempts=max(args.retry_attempts, 1),
            retry_on=(NoDriversAvailableError,),
        )

        for index in range(args.rides):
            user = service.registry.get_user(users[index % len(users)].user_id)
            pickup, dropoff = fake.ride_route()
            prefer_vip = index % 2 == 1
            try:
                await with_retry(
                    lambda u=user, p=pickup, d=dropoff, v=prefer_vip: service.create_ride(
                        u, p, d, prefer_vip=v
                    ),
                    policy,
                    operation_name=f"ride request for {user.name}",
                )
            except NoDriversAvailableError as e:
                logger.error(e.message)

        for ride in service.get_active_rides().values():
            service.complete_ride(ride)

        stats = service.get_stats()
        logger.info(f"Simulation finished: {stats}")
        return stats
    finally:
        reset_service()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(
        level=settings.logging.level,
        json_output=settings.logging.format == "json",
        environment=settings.logging.environment,
    )

    try:
        asyncio.run(run_simulation(args, settings))
    except RideShareError as e:
        logger.error(f"Simulation failed: {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
