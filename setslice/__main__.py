# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from setslice.driver import main

if __name__ == "__main__":
	raise SystemExit(main())
