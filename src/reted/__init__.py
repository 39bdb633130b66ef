"""ReTed - a caching proxy and front end for the talks API."""
