"""genpac: compile gfwlist-style filter rules into proxy auto-config scripts."""

__version__ = "2.0.0"
