from runcommand.main import main

raise SystemExit(main())
