"""MediaWatch: media-server monitoring notifications."""
