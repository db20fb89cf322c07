from .app import OneStepAuthApplication

import asab

asab.Config.add_defaults({
	"web": {
		"listen": "0.0.0.0 8900",
	},

	"asab:storage": {
		"type": "mongodb",
		"mongodb_uri": "mongodb://localhost:27017",
		"mongodb_database": "onestepauth",
	},
})

__all__ = [
	"OneStepAuthApplication",
]
