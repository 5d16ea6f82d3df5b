from .cli.tracker_runner import main

raise SystemExit(main())
