"""Command line tooling around the DNS DaemonSet synthesizer and drift analyzer."""
