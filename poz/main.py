# main.py
import asyncio
import sys

import aiohttp
import discord

from .config import BotConfig, ConfigError
from .discord_bot import PozClient
from .utils.logging_system import setup_log_system

logger = setup_log_system("poz")


async def run_bot(config: BotConfig) -> None:
    """Log in and process gateway events until the connection is closed."""
    async with PozClient(config) as client:
        # login() fetches the bot's own user; failures there end startup
        await client.start(config.discord_token)


def main() -> int:
    try:
        config = BotConfig.from_env()
    except ConfigError as e:
        logger.critical(f"Configuration error: {e}")
        return 1

    # discord.py logs reconnects and non-fatal gateway errors itself
    setup_log_system("discord", level=config.discord_log_level)

    try:
        asyncio.run(run_bot(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")
    except discord.LoginFailure as e:
        logger.critical(f"Login failed: {e}")
        return 1
    except discord.PrivilegedIntentsRequired as e:
        logger.critical(f"Missing privileged intents: {e}")
        return 1
    except discord.ConnectionClosed as e:
        logger.critical(f"Gateway closed the connection (code {e.code}): {e.reason}")
        return 1
    except discord.DiscordException as e:
        logger.critical(f"Discord client stopped: {e!r}", exc_info=True)
        return 1
    except aiohttp.ClientError as e:
        logger.critical(f"Could not reach Discord: {e!r}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
