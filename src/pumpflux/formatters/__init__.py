"""Text formatters for CLI output.

Each formatter takes models or plain dicts and returns a string, so commands
only decide what to show and tests can check output without a terminal.
"""

# Import individual formatters as needed
# Example: from pumpflux.formatters.template_list_formatter import format_template_list
