"""
devtrack core package.

Tracks the time spent on software projects and the lines of code in their
repositories:
- A Typer-based CLI (`devtrack.cli`)
- A SQLite-backed store (`devtrack.datastore.DataStore`) over the tables in
  `sql/schema.sql`
- Line counting (`devtrack.counting`) and reports (`devtrack.report`)

Configuration:
- Filesystem anchors and environment variable names live in
  `devtrack.global_config`.
"""
