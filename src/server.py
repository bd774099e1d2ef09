"""Protean Engine runner for the aftersales domain.

In production (``PROTEAN_ENV=production``) events are processed
asynchronously: the Engine publishes outbox messages and invokes the
notification relay and the complaint queue projector from the broker.

Usage:
    python src/server.py
"""

import argparse
import asyncio

from protean.server.engine import Engine

from aftersales.domain import aftersales, logger


async def run():
    aftersales.init()
    logger.info("Starting engine", domain=aftersales.name)
    await asyncio.gather(Engine(aftersales).run())


def main():
    argparse.ArgumentParser(description="OrderDesk Engine runner").parse_args()
    asyncio.run(run())


if __name__ == "__main__":
    main()
