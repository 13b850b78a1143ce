from statmonitor.main import main

raise SystemExit(main())
