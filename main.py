from rich.pretty import pprint

from vexillum import *

verbose = define_bool("verbose", "v", description="Print what is going on.")
count = define_int("count", "c", 1, "How many times to run.")
output = define_string("output", "o", "out.txt", "Where to write the report.")


if __name__ == '__main__':
    result = parse()
    if result.helped:
        raise SystemExit(0)
    pprint(dict(namespace()))
    pprint(result.remaining)
