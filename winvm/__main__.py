from winvm.cli import main

raise SystemExit(main())
