"""Asynchronous fan-out.

`forecast` and `air_quality` stand for two slow, unrelated service calls.
Both only need `city`, so the engine starts them together and `report`
waits for both: the whole run takes about as long as the slowest call.

Run with:
    autodag resolve examples/weather_report.py -n report
"""

import asyncio

import autodag as ad

graph = ad.Graph("weather")

graph.value("city", "Tokyo")
graph.value("latency", 0.2)


@graph.computation()
async def forecast(city: str, latency: float) -> dict[str, float]:
    await asyncio.sleep(latency)
    return {"high": 24.0, "low": 17.5}


@graph.computation()
async def air_quality(city: str, latency: float) -> int:
    await asyncio.sleep(latency)
    return 42


# Plain functions and coroutines can be mixed freely
@graph.computation()
def report(city: str, forecast: dict[str, float], air_quality: int) -> str:
    return f"{city}: {forecast['low']}-{forecast['high']} C, AQI {air_quality}"


async def main() -> None:
    def show(report: str) -> None:
        print(report)

    await graph.run(show)


if __name__ == "__main__":
    asyncio.run(main())
