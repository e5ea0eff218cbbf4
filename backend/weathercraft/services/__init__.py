# Services: verification flow, Mojang lookup, storage backends, uploads
