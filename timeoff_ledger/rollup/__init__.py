"""Manager Rollup module — upcoming, this-window and calendar views."""
