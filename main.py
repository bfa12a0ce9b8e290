from rich.pretty import pprint

from clopt import *

__prog__ = "demo"

cli = CommandLineOption(shell=True, fancy=True)
(cli.add_options()
    .o("v", "verbose output")
    .o("n", Value(1).with_name("N"), "number of runs")
    .l("count=", Value(5).with_limit(3), "how many times")
    .l("output ", Value(type=str).with_name("FILE"), "output file")
    .l("level", Value(type=int, constraint=lambda x: 0 <= x <= 3), "log level"))


if __name__ == '__main__':
    cli.print_description()
    opts = cli.parse()
    pprint(opts)
    if opts["v"]:
        pprint(opts["count="].extract(list[int]))
