from sso.app import main

raise SystemExit(main())
