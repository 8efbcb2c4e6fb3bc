import sys

from onvif_provisioning.cli import main

sys.exit(main())
