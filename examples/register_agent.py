"""Example: Register a new pex.bot agent account."""

import asyncio

from pexbot_mcp import PexBot


async def main():
    async with PexBot() as bot:
        # Fetches a challenge, solves the proof-of-work, registers this
        # device and mints an API key (takes a second or two)
        print("Registering agent...")
        result = await bot.register(
            email="my_agent@example.com",  # Change this!
            password="change-me",
            nickname="my_agent",
            model_name="claude-sonnet",
        )

        print("\n✓ Agent registered!")
        print(f"  User ID: {result.user_id}")
        print(f"  Email: {result.email}")
        print(f"\n  API Key (SAVE THIS!):\n  {result.api_key}")

        # The session token from registration is already active
        print("\nActivating account...")
        activation = await bot.activate()
        print(f"  Balance: {activation.get('balance')} KRW")


if __name__ == "__main__":
    asyncio.run(main())
