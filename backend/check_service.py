import asyncio
import logging
import sys
from typing import List, Optional

from monitors import build_monitors

USAGE = "usage: check_service.py <ftp|smtp|nntp> <host> [key=value ...]"

# Usage: python check_service.py <ftp|smtp|nntp> <host> [key=value ...]
async def check_service(monitor_name: str, host: str, parameters: dict):
    monitor = build_monitors().get(monitor_name)
    if monitor is None:
        print(f"Unknown monitor '{monitor_name}'")
        return

    result = await monitor.check(host, **parameters)
    print(f"Status: {result.status.value}")
    print(f"Latency: {result.latency_ms}ms, attempts: {result.attempts}")
    if result.error:
        print(f"Error: {result.error}")

def parse_parameters(args: List[str]) -> Optional[dict]:
    """key=value arguments to a dict, None if any argument has no '='"""
    parameters = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep or not key:
            print(f"Expected key=value, got '{arg}'")
            return None
        parameters[key] = value
    return parameters

def main(argv: List[str]) -> int:
    if len(argv) < 2:
        print(USAGE)
        return 1
    parameters = parse_parameters(argv[2:])
    if parameters is None:
        print(USAGE)
        return 1
    asyncio.run(check_service(argv[0], argv[1], parameters))
    return 0

if __name__ == "__main__":
    # Setup basic logging
    logging.basicConfig(level=logging.DEBUG)
    sys.exit(main(sys.argv[1:]))
