"""taiosd - admin notification daemon for Trust TAI OS."""
