"""Starter .findingscope.toml template."""

DEFAULT_TOML = """\
# findingscope configuration
version = "1.0"

[source]
url = "http://127.0.0.1:5000/findings"
timeout = 10.0            # seconds; slower responses count as a timeout
# file = "findings.json"  # read a local JSON/YAML export instead of the URL

[search]
threshold = 0.3           # fuzzy distance: 0 = identical, 1 = unrelated
limit = 5

[suggest]
recent_limit = 3
featured_services = ["S3", "IAM"]
known_services = ["S3", "IAM", "EC2", "RDS", "CloudTrail"]

[history]
path = "~/.findingscope/history.json"
max_entries = 5

[aggregation]
timeline_days = 7
top_services = 6
date_format = "%d %b"

[output]
format = "terminal"       # terminal | json
"""
