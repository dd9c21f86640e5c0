from .tutorial import main

raise SystemExit(main())
