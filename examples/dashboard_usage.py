"""finscope library usage example: refresh prices, value a holding, record transactions."""

import asyncio

from loguru import logger

import finscope
from finscope.core.services.valuation import format_amount


def print_assets(view, limit: int = 10) -> None:
    """Print the top assets with their supplemental quotes."""
    print(f"{'SYMBOL':<8}{'PRICE':>14}  QUOTES")
    for asset in view.filtered_assets[:limit]:
        quotes = ", ".join(f"{source}={format_amount(price)}" for source, price in asset.supplemental_quotes.items())
        print(f"{asset.symbol:<8}{format_amount(asset.price):>14}  {quotes}")


def print_statuses(view) -> None:
    for name, status in view.source_statuses.items():
        detail = f" ({status.error_code})" if status.error_code else ""
        print(f"  {name:<14}{status.state.value}{detail}")
    print(f"  overall: {view.health}")


async def main() -> None:
    dashboard = finscope.get_dashboard()
    async with dashboard:
        dashboard.load()

        view = await dashboard.refresh()
        if view.error:
            logger.error(f"Refresh failed: {view.error['message']}")
            view = await dashboard.retry()

        print_assets(view)
        print_statuses(view)

        if view.selected is not None:
            dashboard.add_holding("0.25")
            for valuation in dashboard.portfolio().valuations:
                print(valuation.holding.asset.symbol, valuation.display())

        dashboard.add_transaction("2500", "Salary", type="income", category="salary")
        dashboard.add_transaction("42.10", "Groceries", category="food")
        summary = dashboard.ledger.summary(dashboard.ledger.filter_by_range("month"))
        print(f"Balance this month: {format_amount(summary.balance)}")

        dashboard.save()


if __name__ == "__main__":
    asyncio.run(main())
