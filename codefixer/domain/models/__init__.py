"""Domain models shared by the collector, correction and updater services."""
