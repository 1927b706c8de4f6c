"""Example: Check a market and place an explained order."""

import asyncio

from pexbot_mcp import HttpError, OrderRequest, PexBot


async def main():
    async with PexBot(api_key="YOUR_API_KEY_HERE") as bot:
        ticker = await bot.get_ticker("BTC-KRW")
        print(f"BTC-KRW last price: {ticker.get('last_price')}")

        balances = await bot.get_balance()
        for balance in balances:
            print(f"  {balance['asset']}: {balance['available']} (locked {balance['locked']})")

        order = OrderRequest(
            symbol="BTC-KRW",
            side="buy",
            order_type="limit",
            quantity="0.001",
            price="50000000",
            reasoning_en="Bounce off support",
            confidence=0.6,
            strategy="mean_reversion",
        )

        try:
            result = await bot.place_order(order)
        except HttpError as e:
            print(f"\n✗ Order failed: {e.status_code}")
            print(e.body)
            return

        print(f"\n✓ Order placed: {result}")


if __name__ == "__main__":
    asyncio.run(main())
