"""factorkb/core — configuration, error hierarchy and shared result types."""
